# app/core/process_lock.py
from filelock import FileLock
from pathlib import Path

from app.config import settings

# Create a directory for lock files to keep things clean.
lock_dir = Path(settings.LOCK_DIR)
lock_dir.mkdir(parents=True, exist_ok=True)

# A dedicated lock for the segmentation model.
# Only one thread or process can run inference on the session at a time.
inference_lock = FileLock(lock_dir / "u2net_model.lock", timeout=settings.LOCK_TIMEOUT)
