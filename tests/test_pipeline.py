from io import BytesIO

import numpy as np
import pytest
from PIL import Image
from structlog.testing import capture_logs

from app.core.errors import DecodeFailure, UnexpectedInferenceOutput, UninitializedInference
from app.models.options import Color, PrintOptions, RemovalOptions, StrokeOptions
from app.models.stages import Stage
from app.services.pipeline import BackgroundRemovalPipeline


def _decode(data: bytes) -> np.ndarray:
    image = Image.open(BytesIO(data))
    assert image.format == "PNG"
    assert image.mode == "RGBA"
    return np.array(image)


@pytest.fixture
def pipeline(fake_model_manager):
    return BackgroundRemovalPipeline(fake_model_manager())


def test_full_foreground_mask_keeps_every_pixel(pipeline, red_png):
    pixels = _decode(pipeline.remove_background(red_png))

    assert pixels.shape == (300, 400, 4)
    assert (pixels[..., 3] == 255).all()
    assert (pixels[..., :3] == (255, 0, 0)).all()


def test_empty_mask_makes_everything_transparent(fake_model_manager, red_png):
    pipeline = BackgroundRemovalPipeline(fake_model_manager(mask=np.zeros((320, 320), np.float32)))
    pixels = _decode(pipeline.remove_background(red_png))

    assert (pixels[..., 3] == 0).all()
    assert (pixels[..., :3] == (255, 0, 0)).all()


def test_hard_options_give_a_sharp_cut(fake_model_manager, red_png):
    mask = np.zeros((320, 320), np.float32)
    mask[:, 160:] = 1.0
    pipeline = BackgroundRemovalPipeline(fake_model_manager(mask=mask))
    options = RemovalOptions(threshold=0.5, smooth_mask=False, enhance_edges=False)

    pixels = _decode(pipeline.remove_background(red_png, options))

    # Nearest resampling: column x reads mask column floor(x * 320 / 400).
    assert (pixels[:, :200, 3] == 0).all()
    assert (pixels[:, 200:, 3] == 255).all()


def test_invalid_bytes_raise_decode_failure(pipeline):
    with pytest.raises(DecodeFailure):
        pipeline.remove_background(b"definitely not an image")
    with pytest.raises(DecodeFailure):
        pipeline.remove_background(b"")


def test_uninitialized_session_is_reported(fake_model_manager, red_png):
    pipeline = BackgroundRemovalPipeline(fake_model_manager(initialized=False))
    with pytest.raises(UninitializedInference):
        pipeline.remove_background(red_png)


def test_malformed_model_output_is_reported(fake_model_manager, red_png):
    manager = fake_model_manager(outputs=[np.zeros((1, 1, 10, 10), np.float32)])
    with pytest.raises(UnexpectedInferenceOutput):
        BackgroundRemovalPipeline(manager).remove_background(red_png)


def test_stroke_pipeline_pads_and_paints_both_bands(pipeline, red_png):
    options = StrokeOptions(inner_color=Color.parse("#00ff00"), inner_width=3, outer_width=6)

    pixels = _decode(pipeline.remove_background_with_stroke(red_png, options))

    # 20px padding covers the 9px outer radius.
    assert pixels.shape == (340, 440, 4)
    row = pixels[170]
    assert tuple(row[20]) == (255, 0, 0, 255)
    for x in range(17, 20):
        assert tuple(row[x]) == (0, 255, 0, 255)
    for x in range(11, 17):
        assert tuple(row[x]) == (0, 0, 0, 51)
    assert row[10, 3] == 0
    assert pixels[0, 0, 3] == 0


def test_stroke_pipeline_grows_padding_for_wide_strokes(pipeline, red_png):
    options = StrokeOptions(inner_color=Color.parse("white"), inner_width=10, outer_width=15)
    pixels = _decode(pipeline.remove_background_with_stroke(red_png, options))
    assert pixels.shape == (300 + 50, 400 + 50, 4)
    assert pixels[175, 0, 3] == 51


def test_print_pipeline_scales_and_strokes(pipeline, red_png):
    options = PrintOptions(
        target_width_mm=40,
        target_height_mm=30,
        dpi=254,
        inner_color=Color.parse("#0000ff"),
        inner_width_mm=0.5,
        outer_width_mm=0.5,
    )

    pixels = _decode(pipeline.remove_background_scale_and_stroke(red_png, options))

    # 400x300 px target plus a 10px allowance for the outer radius on each side.
    assert pixels.shape == (320, 420, 4)
    assert tuple(pixels[160, 10]) == (255, 0, 0, 255)
    assert tuple(pixels[160, 5]) == (0, 0, 255, 255)
    assert tuple(pixels[160, 2]) == (0, 0, 0, 51)
    assert pixels[0, 0, 3] == 0


def test_print_pipeline_crop_to_fit(pipeline, red_png):
    options = PrintOptions(
        target_width_mm=20,
        target_height_mm=20,
        dpi=254,
        inner_color=Color.parse("#0000ff"),
        crop_to_fit=True,
    )
    pixels = _decode(pipeline.remove_background_scale_and_stroke(red_png, options))
    assert pixels.shape == (200, 200, 4)
    assert (pixels[..., 3] == 255).all()


def test_add_opaque_background_returns_jpeg(pipeline, png_bytes):
    image = Image.new("RGBA", (20, 10), (0, 0, 0, 0))
    image.paste((255, 255, 255, 255), (10, 0, 20, 10))

    data = pipeline.add_opaque_background(png_bytes(image), "#0000ff")

    out = Image.open(BytesIO(data))
    assert out.format == "JPEG"
    assert out.size == (20, 10)
    left = np.array(out)[5, 2].astype(int)
    right = np.array(out)[5, 17].astype(int)
    assert left[2] > 200 and left[0] < 40
    assert (right > 200).all()


def _logged_stages(logs):
    return [entry["stage"] for entry in logs if entry.get("event") == "Stage complete"]


def test_stages_are_logged_in_order(pipeline, red_png):
    with capture_logs() as logs:
        pipeline.remove_background(red_png)

    assert _logged_stages(logs) == [
        Stage.DECODED, Stage.PRE_NORMALIZED, Stage.INFERRED, Stage.MASK_RESAMPLED,
        Stage.MASK_REFINED, Stage.ALPHA_COMPOSITED, Stage.ENCODED,
    ]


def test_optional_stages_follow_options(fake_model_manager, red_png):
    pipeline = BackgroundRemovalPipeline(fake_model_manager())
    with capture_logs() as logs:
        pipeline.remove_background(red_png, RemovalOptions(enhance_edges=False))
    stages = _logged_stages(logs)
    assert Stage.MASK_RESAMPLED in stages
    assert Stage.MASK_REFINED not in stages

    with capture_logs() as logs:
        pipeline.remove_background_with_stroke(red_png, StrokeOptions(inner_color=Color.parse("white"), inner_width=2))
    assert _logged_stages(logs)[-3:] == [Stage.SCALED, Stage.STROKED, Stage.ENCODED]
