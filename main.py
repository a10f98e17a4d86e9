"""
FastAPI service for background removal, print scaling and silhouette strokes.
"""
import asyncio
import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError

from app.config import settings
from app.core.errors import DecodeFailure, SilhouetteError, UninitializedInference
from app.core.model_manager import ModelManager
from app.models.options import Color, PrintOptions, RemovalOptions, StrokeOptions
from app.services.pipeline import BackgroundRemovalPipeline

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.LOG_LEVEL.upper())),
)
log = structlog.get_logger(__name__)

# Global model manager instance
model_manager: ModelManager = None
pipeline: BackgroundRemovalPipeline = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for loading the model on startup and cleanup on shutdown."""
    global model_manager, pipeline

    log.info("Starting service initialization...")

    model_manager = ModelManager()
    await model_manager.initialize()

    pipeline = BackgroundRemovalPipeline(model_manager)

    log.info("Service initialization complete. Ready to process requests.")

    yield

    # Cleanup
    log.info("Shutting down service...")
    if model_manager:
        await model_manager.cleanup()
    log.info("Service shutdown complete.")


app = FastAPI(
    title="Silhouette Cutout Service",
    description="Background removal with feathered alpha, print scaling and dual silhouette strokes",
    version="1.0.0",
    lifespan=lifespan
)


async def _run(operation: str, *args) -> bytes:
    """Runs a blocking pipeline call in a worker thread and maps failures to HTTP errors."""
    if not pipeline:
        raise HTTPException(status_code=503, detail="Service not initialized")
    try:
        log.info("Received request", operation=operation)
        result = await asyncio.to_thread(getattr(pipeline, operation), *args)
        log.info("Request completed", operation=operation, bytes=len(result))
        return result
    except DecodeFailure as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UninitializedInference as e:
        raise HTTPException(status_code=503, detail=str(e))
    except SilhouetteError as e:
        log.exception("Pipeline failed", operation=operation)
        raise HTTPException(status_code=500, detail=f"Processing failed: {e}")
    except Exception as e:
        log.exception("Error processing request", operation=operation)
        raise HTTPException(status_code=500, detail=f"Processing failed: {str(e)}")


def _build(options_cls, **fields):
    """Builds an options model from form fields, turning bad input into a 400."""
    try:
        for key in ("inner_color", "outer_color"):
            if key in fields:
                fields[key] = Color.parse(fields[key])
        return options_cls(**fields)
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid options: {e}")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "models_loaded": model_manager.is_initialized if model_manager else False
    }


@app.post("/remove-background")
async def remove_background(
    file: UploadFile = File(...),
    threshold: float = Form(0.5),
    smooth_mask: bool = Form(True),
    enhance_edges: bool = Form(True),
):
    options = _build(RemovalOptions, threshold=threshold, smooth_mask=smooth_mask, enhance_edges=enhance_edges)
    image_bytes = await file.read()
    png = await _run("remove_background", image_bytes, options)
    return Response(content=png, media_type="image/png")


@app.post("/remove-background/stroke")
async def remove_background_with_stroke(
    file: UploadFile = File(...),
    inner_color: str = Form(...),
    inner_width: float = Form(...),
    outer_color: str = Form("#000000"),
    outer_width: float = Form(6.0),
    outer_opacity: float = Form(0.2),
):
    options = _build(
        StrokeOptions,
        inner_color=inner_color,
        inner_width=inner_width,
        outer_color=outer_color,
        outer_width=outer_width,
        outer_opacity=outer_opacity,
    )
    image_bytes = await file.read()
    png = await _run("remove_background_with_stroke", image_bytes, options)
    return Response(content=png, media_type="image/png")


@app.post("/remove-background/print")
async def remove_background_scale_and_stroke(
    file: UploadFile = File(...),
    target_width_mm: float = Form(...),
    target_height_mm: float = Form(...),
    inner_color: str = Form(...),
    outer_color: str = Form("#000000"),
    inner_width_mm: float = Form(0.0),
    outer_width_mm: float = Form(0.0),
    outer_opacity: float = Form(0.2),
    dpi: int = Form(300),
    crop_to_fit: bool = Form(False),
):
    options = _build(
        PrintOptions,
        target_width_mm=target_width_mm,
        target_height_mm=target_height_mm,
        inner_color=inner_color,
        outer_color=outer_color,
        inner_width_mm=inner_width_mm,
        outer_width_mm=outer_width_mm,
        outer_opacity=outer_opacity,
        dpi=dpi,
        crop_to_fit=crop_to_fit,
    )
    image_bytes = await file.read()
    png = await _run("remove_background_scale_and_stroke", image_bytes, options)
    return Response(content=png, media_type="image/png")


@app.post("/add-background")
async def add_background(
    file: UploadFile = File(...),
    color: str = Form(...),
):
    parsed = _build(Color.parse, value=color)
    image_bytes = await file.read()
    jpeg = await _run("add_opaque_background", image_bytes, parsed)
    return Response(content=jpeg, media_type="image/jpeg")


@app.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": "Silhouette Cutout Service",
        "version": "1.0.0",
        "endpoints": {
            "health": "/health",
            "remove_background": "/remove-background",
            "stroke": "/remove-background/stroke",
            "print": "/remove-background/print",
            "add_background": "/add-background",
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower()
    )
