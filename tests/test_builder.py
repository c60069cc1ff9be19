from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from models.errors import DecodeError, NotLoadedError
from models.load_source import BufferSource, EncodedSource, SnapshotSource
from models.pixel_buffer import PixelBuffer, PixelFormat
from models.snapshot import Snapshot
from pipeline.builder import PipelineBuilder
from services import transforms
from services.codec_service import CodecService


STEPS = [
    ("grayscale", ()),
    ("invert_colors", ()),
    ("resize", (2, 2)),
    ("rotate", (90,)),
    ("flip_horizontal", ()),
    ("flip_vertical", ()),
    ("build", ()),
]


@pytest.mark.parametrize("name,args", STEPS)
def test_every_step_requires_load(name, args):
    builder = PipelineBuilder()
    assert not builder.is_loaded
    with pytest.raises(NotLoadedError) as err:
        getattr(builder, name)(*args)
    assert err.value.operation == name


def test_grayscale_scenario(primaries_2x2):
    snap = PipelineBuilder().load(primaries_2x2).grayscale().build()
    rgb = snap.pixels().as_rgb()
    assert snap.format is PixelFormat.GRAY8
    assert rgb[0, 0].tolist() == [54, 54, 54]
    assert [rgb[y, x, 0] for y in range(2) for x in range(2)] == [54, 182, 18, 255]


def test_chain_matches_direct_calls(noise_rgb):
    snap = (PipelineBuilder()
            .load(noise_rgb)
            .rotate(90)
            .resize(4, 6)
            .invert_colors()
            .flip_vertical()
            .build())
    expected = transforms.flip_vertical(
        transforms.invert_colors(transforms.resize(transforms.rotate(noise_rgb, 90), 4, 6))
    )
    assert snap.pixels() == expected


def test_apply_by_name(noise_rgb):
    snap = PipelineBuilder().load(noise_rgb).apply("resize", 2, 3).apply("flip_horizontal").build()
    assert snap.pixels() == transforms.flip_horizontal(transforms.resize(noise_rgb, 2, 3))
    with pytest.raises(ValueError):
        PipelineBuilder().load(noise_rgb).apply("sharpen")


def test_rotate_uses_builder_background(white_square):
    snap = PipelineBuilder(rotate_background=200).load(white_square).rotate(45).build()
    assert snap.pixels().pixel(0, 0) == (200, 200, 200)


def test_load_variants_are_equivalent(noise_rgb):
    data = CodecService().encode(noise_rgb, "png")
    base = Snapshot(noise_rgb)
    sources = [
        noise_rgb,
        BufferSource(noise_rgb),
        base,
        SnapshotSource(base),
        EncodedSource(data, "png"),
        np.array(noise_rgb.pixels),
    ]
    for source in sources:
        assert PipelineBuilder().load(source).build().pixels() == noise_rgb
    assert PipelineBuilder().load(data, fmt="png").build().pixels() == noise_rgb


def test_load_bytes_without_format_fails(noise_rgb):
    with pytest.raises(ValueError):
        PipelineBuilder().load(b"\x89PNG")


def test_load_unknown_type_fails():
    with pytest.raises(TypeError):
        PipelineBuilder().load(42)


def test_failed_load_keeps_previous_image(noise_rgb):
    builder = PipelineBuilder().load(noise_rgb)
    with pytest.raises(DecodeError):
        builder.load(b"definitely not an image", fmt="png")
    assert builder.build().pixels() is noise_rgb


def test_clone_then_new_pipeline_leaves_original_alone(noise_rgb):
    original = PipelineBuilder().load(noise_rgb).build()
    before = original.pixels().pixels.copy()

    branch = PipelineBuilder().load(original.clone()).invert_colors().flip_horizontal().build()

    assert np.array_equal(original.pixels().pixels, before)
    assert branch.pixels() != original.pixels()


def test_fan_out_from_one_snapshot(noise_rgb):
    base = PipelineBuilder().load(noise_rgb).build()
    gray = PipelineBuilder().load(base).grayscale().build()
    small = PipelineBuilder().load(base).resize(1, 1).build()
    assert gray.format is PixelFormat.GRAY8
    assert small.pixels().size == (1, 1)
    assert base.pixels() == noise_rgb


def test_caller_array_changes_do_not_leak():
    arr = np.zeros((2, 2, 3), dtype=np.uint8)
    snap = PipelineBuilder().load(arr).build()
    arr[:] = 99
    assert snap.pixels().pixel(1, 1) == (0, 0, 0)


def test_snapshot_cannot_be_written_through(noise_rgb):
    snap = PipelineBuilder().load(noise_rgb).build()
    with pytest.raises(ValueError):
        snap.pixels().pixels[0, 0] = 0


def test_builder_keeps_going_after_build(noise_rgb):
    builder = PipelineBuilder().load(noise_rgb)
    first = builder.build()
    second = builder.invert_colors().build()
    assert first.pixels() == noise_rgb
    assert second.pixels() == transforms.invert_colors(noise_rgb)


def test_buffer_built_from_a_view_is_detached():
    base = np.zeros((2, 2, 3), dtype=np.uint8)
    snap = PipelineBuilder().load(PixelBuffer(pixels=base[:], format=PixelFormat.RGB24)).build()
    base[0, 0] = 9
    assert snap.pixels().pixel(0, 0) == (0, 0, 0)


def test_constructing_a_buffer_leaves_caller_array_writable():
    arr = np.zeros((2, 2), dtype=np.uint8)
    PixelBuffer(pixels=arr, format=PixelFormat.GRAY8)
    assert arr.flags.writeable


def test_concurrent_fan_out_from_one_snapshot(noise_rgb):
    base = PipelineBuilder().load(noise_rgb).build()
    before = base.pixels().pixels.copy()

    def branch(degrees):
        return PipelineBuilder().load(base).invert_colors().rotate(degrees).build()

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(branch, [0, 90, 180, 270, 45, 30, 360, 135]))

    assert np.array_equal(base.pixels().pixels, before)
    for degrees, snap in zip([0, 90, 180, 270, 45, 30, 360, 135], results):
        assert snap.pixels() == transforms.rotate(transforms.invert_colors(noise_rgb), degrees)
