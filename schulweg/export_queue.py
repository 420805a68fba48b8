import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .export import ExportResult, export_request
from .logging import get_logger
from .model import TransportRequest

log = get_logger(__name__)


@dataclass
class ExportJob:
    id: str
    request: TransportRequest
    status: str = "queued"
    file_name: Optional[str] = None
    result_path: Optional[str] = None
    error: Optional[str] = None
    future: Optional[Future] = field(default=None, repr=False)


class ExportQueue:
    """
    Runs exports on one worker thread so the page can show its "generating"
    state before composition starts. Only one export may be in flight;
    submit() refuses further requests until it has finished.

    One queue serves one form session. Finished jobs are dropped on the next
    submit, so only the latest result is kept.
    """

    def __init__(self, exporter: Callable[[TransportRequest], ExportResult] = export_request):
        self.exporter = exporter
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="export")
        self.jobs: Dict[str, ExportJob] = {}
        self.lock = threading.Lock()
        self._active: Optional[str] = None

    def in_flight(self) -> bool:
        with self.lock:
            return self._active is not None

    def submit(self, request: TransportRequest) -> Optional[str]:
        with self.lock:
            if self._active is not None:
                log.warning("export_already_running", job_id=self._active)
                return None
            self._prune_finished()
            job_id = uuid.uuid4().hex[:12]
            job = ExportJob(id=job_id, request=request)
            self.jobs[job_id] = job
            self._active = job_id
        job.future = self.executor.submit(self._run_job, job_id)
        return job_id

    def _run_job(self, job_id: str) -> None:
        with self.lock:
            job = self.jobs[job_id]
            job.status = "running"
        try:
            result = self.exporter(job.request)
        except Exception as exc:
            with self.lock:
                job.status = "failed"
                job.error = str(exc)
                self._active = None
            raise
        with self.lock:
            job.file_name = result.file_name
            if result.ok:
                job.status = "completed"
                job.result_path = str(result.path)
            else:
                job.status = "failed"
                job.error = result.error
            self._active = None

    def _prune_finished(self) -> None:
        finished = [job_id for job_id, job in self.jobs.items() if job.status in {"completed", "failed"}]
        for job_id in finished:
            del self.jobs[job_id]

    def get(self, job_id: str) -> Optional[ExportJob]:
        with self.lock:
            return self.jobs.get(job_id)

    def wait(self, job_id: str, timeout: Optional[float] = None) -> ExportJob:
        """Block until the job has finished. Re-raises what the exporter raised."""
        job = self.get(job_id)
        if job is None:
            raise KeyError(job_id)
        job.future.result(timeout=timeout)
        return job

    def shutdown(self) -> None:
        self.executor.shutdown(wait=True)
