"""
Tests for the persisted image record
"""

import numpy as np
import pytest
from pydantic import ValidationError

from imagecore.exceptions import InvalidShape, SizeMismatch, TypeMismatch
from imagecore.image.dense import Image
from imagecore.numerics import ElementKind
from imagecore.schemas import ImageRecord


class TestImageRecord:
    """Test export and restore through ImageRecord"""

    def test_to_record(self, double_image, double_values):
        """Test record fields"""
        record = double_image.to_record()
        assert record.width == 1
        assert record.height == 4
        assert record.element_kind == "float64"
        assert record.raw_bytes == double_values.tobytes()

    @pytest.mark.parametrize("kind", list(ElementKind))
    def test_restore_every_kind(self, kind):
        """Test an image restores to an equal image for each kind"""
        image = Image.from_array(np.arange(12) % 7, 3, 4, kind)
        restored = Image.from_record(image.to_record(), kind)
        assert restored.bitwise_equals(image)
        assert hash(restored) == hash(image)

    def test_json_restore(self, random_float_image):
        """Test the record survives JSON serialization"""
        record = random_float_image.to_record()
        payload = record.model_dump_json()
        assert isinstance(payload, str)

        restored_record = ImageRecord.model_validate_json(payload)
        assert restored_record == record
        assert Image.from_record(restored_record, "float64") == random_float_image

    def test_wrong_kind(self, small_image):
        """Test restoring as another kind is rejected"""
        with pytest.raises(TypeMismatch):
            Image.from_record(small_image.to_record(), ElementKind.UINT32)

    def test_non_positive_dimensions(self):
        """Test zero or negative dimensions are rejected on restore"""
        record = ImageRecord(width=0, height=2, element_kind="int8", raw_bytes=b"")
        with pytest.raises(InvalidShape):
            Image.from_record(record, "int8")

        record = ImageRecord(width=2, height=-1, element_kind="int8", raw_bytes=b"\x00\x00")
        with pytest.raises(InvalidShape):
            Image.from_record(record, "int8")

    def test_short_payload(self):
        """Test missing bytes are rejected on restore"""
        record = ImageRecord(width=2, height=2, element_kind="int16", raw_bytes=b"\x01" * 7)
        with pytest.raises(SizeMismatch):
            Image.from_record(record, ElementKind.INT16)

    def test_record_is_frozen(self, small_image):
        """Test records are immutable"""
        record = small_image.to_record()
        with pytest.raises(ValidationError):
            record.width = 10

    def test_dimension_range(self):
        """Test dimensions must fit in 32 bits"""
        with pytest.raises(ValidationError):
            ImageRecord(width=2**31, height=1, element_kind="int8", raw_bytes=b"")

    def test_restored_image_independent(self):
        """Test restored images do not alias the record bytes"""
        payload = bytearray(np.arange(4, dtype=np.int32).tobytes())
        record = ImageRecord(width=2, height=2, element_kind="int32", raw_bytes=bytes(payload))
        image = Image.from_record(record, "int32")
        payload[0] = 99
        assert list(image) == [0, 1, 2, 3]
