"""
Download the segmentation model to the configured MODEL_PATH.
This script provides explicit logging of the download location for verification.
"""
import os
import sys
import urllib.request

from app.config import settings


def download_models(model_path: str = settings.MODEL_PATH, model_url: str = settings.MODEL_URL) -> int:
    """Download the model if it is missing. Returns a process exit code."""
    print("=" * 70)
    print("Model Download Script - Silhouette Cutout Service")
    print("=" * 70)
    print(f"--> Model will be saved to: {model_path}")

    model_dir = os.path.dirname(model_path)
    if model_dir:
        os.makedirs(model_dir, exist_ok=True)

    if os.path.exists(model_path):
        print(f"      ✓ Model already exists at: {model_path}")
        return 0

    partial_path = model_path + ".part"
    try:
        print(f"\n[1/1] Downloading segmentation model from {model_url}...")
        urllib.request.urlretrieve(model_url, partial_path)
        os.replace(partial_path, model_path)
        print(f"      ✓ Model downloaded and saved to: {model_path}")
    except OSError as e:
        print(f"      ERROR: Failed to download model: {e}")
        if os.path.exists(partial_path):
            os.remove(partial_path)
        return 1

    print("\n" + "=" * 70)
    print("All required models downloaded successfully!")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(download_models())
