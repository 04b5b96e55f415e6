from __future__ import annotations

import io

import pytest
from PIL import Image

from campus_market.services import image_optimizer
from campus_market.services.image_optimizer import (
    SIZE_PROFILES,
    DecodeError,
    EncodeError,
    SizeProfile,
    calculate_dimensions,
    get_profile,
    is_image_data_url,
    is_webp_data_url,
    optimize_image,
    parse_data_url,
    to_data_url,
)
from conftest import image_bytes, noisy_image_bytes


def _open(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def test_large_product_photo_is_scaled_from_width():
    result = optimize_image(image_bytes(3000, 2000, "JPEG"), "product")
    assert (result.width, result.height) == (800, 533)
    assert result.mime_type == "image/webp"
    decoded = _open(result.data)
    assert decoded.format == "WEBP"
    assert decoded.size == (800, 533)


def test_small_image_keeps_its_dimensions():
    result = optimize_image(image_bytes(300, 200), "product")
    assert (result.width, result.height) == (300, 200)
    assert _open(result.data).format == "WEBP"


def test_square_image_on_thumbnail_profile():
    result = optimize_image(image_bytes(1200, 1200), "thumbnail")
    assert (result.width, result.height) == (400, 400)


def test_house_profile_uses_wider_box():
    result = optimize_image(image_bytes(2400, 1600, "JPEG"), "house")
    assert (result.width, result.height) == (1200, 800)


def test_text_input_raises_decode_error():
    with pytest.raises(DecodeError):
        optimize_image(b"hello, this is definitely not an image\n", "product")


def test_empty_input_raises_decode_error():
    with pytest.raises(DecodeError):
        optimize_image(b"", "product")


@pytest.mark.parametrize(
    "size, profile",
    [
        ((640, 480), "product"),
        ((801, 10), "product"),
        ((10, 5000), "service"),
        ((1000, 2000), "house"),
        ((1600, 1000), "house"),
        ((399, 401), "thumbnail"),
    ],
)
def test_output_fits_box_without_upscaling(size, profile):
    w, h = size
    box = get_profile(profile)
    tw, th = calculate_dimensions(w, h, box.max_width, box.max_height)
    assert tw <= max(w, box.max_width) and th <= max(h, box.max_height)
    assert tw <= w and th <= h
    assert tw <= box.max_width and th <= box.max_height
    # aspect ratio preserved within rounding
    assert abs(tw - round(th * w / h)) <= 1 or abs(th - round(tw * h / w)) <= 1


def test_portrait_image_is_driven_by_height():
    assert calculate_dimensions(1000, 2000, 800, 800) == (400, 800)


def test_wide_image_on_house_box_is_clamped_to_height():
    # 1200 wide would need 1200 / 1.2 = 1000 rows; the box only allows 900
    assert calculate_dimensions(2400, 2000, 1200, 900) == (1080, 900)


def test_dimensions_are_deterministic():
    first = optimize_image(image_bytes(1234, 777), "product")
    second = optimize_image(image_bytes(1234, 777), "product")
    assert (first.width, first.height) == (second.width, second.height)


def test_lower_quality_is_not_larger():
    source = noisy_image_bytes(600, 400)
    low = optimize_image(source, SizeProfile(max_width=800, max_height=800, quality=0.85))
    high = optimize_image(source, SizeProfile(max_width=800, max_height=800, quality=1.0))
    assert low.size <= high.size


def test_transparency_is_kept():
    data = image_bytes(50, 50, mode="RGBA", color=(0, 120, 0, 128))
    result = optimize_image(data, "thumbnail")
    assert _open(result.data).mode == "RGBA"


def test_exif_orientation_is_applied():
    img = Image.new("RGB", (300, 100), (10, 200, 10))
    exif = Image.Exif()
    exif[0x0112] = 6  # rotate 90 CW on display
    buf = io.BytesIO()
    img.save(buf, format="JPEG", exif=exif)
    result = optimize_image(buf.getvalue(), "product")
    assert (result.width, result.height) == (100, 300)


def test_reports_original_size():
    data = image_bytes(3000, 2000, "JPEG")
    result = optimize_image(data, "product")
    assert result.original_size == len(data)
    assert (result.original_width, result.original_height) == (3000, 2000)


def test_profiles_table():
    assert set(SIZE_PROFILES) == {"product", "service", "house", "thumbnail"}
    assert get_profile("house") == SizeProfile(max_width=1200, max_height=900, quality=0.85)
    with pytest.raises(ValueError):
        get_profile("poster")


def test_invalid_profile_values_are_rejected():
    with pytest.raises(ValueError):
        SizeProfile(max_width=0, max_height=10, quality=0.5)
    with pytest.raises(ValueError):
        SizeProfile(max_width=10, max_height=10, quality=1.5)


def test_data_url_helpers():
    result = optimize_image(image_bytes(20, 20), "thumbnail")
    url = result.to_data_url()
    assert is_image_data_url(url)
    assert is_webp_data_url(url)
    mime, payload = parse_data_url(url)
    assert mime == "image/webp"
    assert payload == result.data

    png_url = to_data_url(image_bytes(5, 5), "image/png")
    assert is_image_data_url(png_url) and not is_webp_data_url(png_url)
    assert not is_image_data_url("https://example.com/a.png")
    assert not is_image_data_url(None)


def test_bad_data_url_raises_decode_error():
    with pytest.raises(DecodeError):
        parse_data_url("data:image/png;base64,@@@not-base64@@@")
    with pytest.raises(DecodeError):
        parse_data_url("https://example.com/photo.jpg")


def test_sliver_that_scales_to_zero_width_is_an_encode_error():
    # 1x2000 into 1200x900 gives a 0.45px wide target.
    assert calculate_dimensions(1, 2000, 1200, 900) == (0, 900)
    with pytest.raises(EncodeError):
        optimize_image(image_bytes(1, 2000), "house")


def test_missing_webp_encoder_is_an_encode_error(monkeypatch):
    monkeypatch.setattr(image_optimizer.features, "check", lambda name: False)
    with pytest.raises(EncodeError, match="not available"):
        optimize_image(image_bytes(100, 100), "product")
