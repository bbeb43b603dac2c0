import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from urllib.parse import urljoin

import psutil
import requests
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class VideoMode(str, Enum):
    DOWNLOAD_ALL = "Download All"
    STREAM = "Stream"
    NONE = "No Video"

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            return cls.STREAM


class VideoManager:
    """
    Resolves relative exercise video paths ("/resources/squats.mp4") to a
    playable URL according to the video mode, and keeps the download cache.
    """

    def __init__(self, base_url: str, cache_dir: str, mode=VideoMode.STREAM,
                 stream_on_cache_miss: bool = True, timeout: float = 30.0, workers: int = 4,
                 local_url: str = None):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.cache_dir = cache_dir
        # e.g. "/workout/videos/cache/{name}"; cached files are file:// URLs otherwise
        self.local_url = local_url
        self.mode = VideoMode.parse(mode)
        self.stream_on_cache_miss = stream_on_cache_miss
        self.timeout = timeout
        self.workers = workers

        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._executor = None
        self.progress = None  # (completed, total) while a bulk download runs

    def configure(self, settings: dict):
        self.mode = VideoMode.parse(settings.get("video_mode"))
        self.stream_on_cache_miss = bool(settings.get("stream_on_cache_miss", True))

    # ───────── Resolution ─────────

    def remote_url(self, rel: str) -> str:
        return urljoin(self.base_url, rel.lstrip("/"))

    def local_path(self, rel: str) -> str:
        """Cached file location, keyed by file name only."""
        return os.path.join(self.cache_dir, secure_filename(os.path.basename(rel)))

    def ensure_cache_dir(self):
        os.makedirs(self.cache_dir, exist_ok=True)

    def is_cached(self, rel: str) -> bool:
        return os.path.exists(self.local_path(rel))

    def playable_url(self, rel):
        if not rel or self.mode is VideoMode.NONE:
            return None
        if self.mode is VideoMode.STREAM:
            return self.remote_url(rel)

        if self.is_cached(rel):
            local = self.local_path(rel)
            if self.local_url:
                return self.local_url.format(name=os.path.basename(local))
            return "file://" + local
        if self.stream_on_cache_miss:
            return self.remote_url(rel)
        return None

    def check_playable(self, url: str) -> bool:
        """Readiness check: the cached file exists or the remote answers a HEAD."""
        if not url.startswith(self.base_url):
            return self.is_cached(url)
        try:
            r = requests.head(url, timeout=self.timeout, allow_redirects=True)
            return r.ok
        except requests.RequestException as e:
            logger.info("video not reachable %s: %s", url, e)
            return False

    # ───────── Bulk download ─────────

    def download_all(self, rel_paths, progress=None, completion=None):
        """
        Fetch every missing file in `rel_paths` on a worker pool.

        `progress(completed, total)` fires after each item whether it was
        downloaded, already cached, or failed; `completion()` fires once after
        the last item. Returns immediately.
        """
        self.ensure_cache_dir()
        unique = list(dict.fromkeys(p for p in rel_paths if p))
        total = len(unique)
        if not unique:
            self.progress = None
            if completion:
                completion()
            return

        self._cancel.clear()
        state = {"completed": 0}
        self.progress = (0, total)

        def finished(_future):
            with self._lock:
                state["completed"] += 1
                done = state["completed"]
                self.progress = (done, total) if done < total else None
            if progress:
                progress(done, total)
            if done == total and completion:
                completion()

        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="video-dl")
            executor = self._executor
        for rel in unique:
            executor.submit(self.download_if_needed, rel).add_done_callback(finished)

    def download_if_needed(self, rel: str) -> bool:
        if self.is_cached(rel):
            return True
        dest = self.local_path(rel)
        if self._cancel.is_set():
            return False

        tmp = dest + ".download"
        try:
            with requests.get(self.remote_url(rel), stream=True, timeout=self.timeout) as r:
                r.raise_for_status()
                with open(tmp, "wb") as f:
                    for chunk in r.iter_content(chunk_size=64 * 1024):
                        if self._cancel.is_set():
                            raise InterruptedError("download cancelled")
                        f.write(chunk)
            os.replace(tmp, dest)
            return True
        except (requests.RequestException, OSError) as e:
            logger.warning("skipping video %s: %s", rel, e)
            if os.path.exists(tmp):
                os.remove(tmp)
            return False

    def cancel_all(self):
        self._cancel.set()
        self.progress = None

    def shutdown(self):
        self.cancel_all()
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None

    # ───────── Cache stats ─────────

    def cache_status(self) -> dict:
        files = 0
        used = 0
        if os.path.isdir(self.cache_dir):
            for name in os.listdir(self.cache_dir):
                path = os.path.join(self.cache_dir, name)
                if os.path.isfile(path) and not name.endswith(".download"):
                    files += 1
                    used += os.path.getsize(path)

        free_gb = None
        try:
            disk_path = self.cache_dir if os.path.isdir(self.cache_dir) else os.path.dirname(self.cache_dir) or "."
            free_gb = round(psutil.disk_usage(disk_path).free / (1024 ** 3), 2)
        except OSError:
            pass

        return {
            "mode": self.mode.value,
            "files": files,
            "used_mb": round(used / (1024 ** 2), 2),
            "free_gb": free_gb,
            "progress": self.progress,
        }
