"""Tests for the imgseg exception hierarchy."""

from __future__ import annotations

import pytest


class TestImgSegError:
    """Test base ImgSegError class."""

    def test_basic_error(self):
        from imgseg.foundation.exceptions import ImgSegError

        err = ImgSegError("Something went wrong")
        assert "Something went wrong" in str(err)
        assert err.message == "Something went wrong"
        assert err.suggestion is None
        assert err.details == {}

    def test_error_with_suggestion(self):
        from imgseg.foundation.exceptions import ImgSegError

        err = ImgSegError("Something went wrong", suggestion="Try this instead")
        assert "Suggestion: Try this instead" in str(err)
        assert err.suggestion == "Try this instead"


class TestConfigurationErrors:
    def test_invalid_operator_lists_available(self):
        from imgseg.foundation.exceptions import ConfigurationError, InvalidOperatorError

        err = InvalidOperatorError("mutation", "gauss", ["creep", "random_reset"])
        assert isinstance(err, ConfigurationError)
        assert "gauss" in str(err)
        assert "creep, random_reset" in str(err)
        assert err.details["operator_type"] == "mutation"

    def test_missing_config_points_at_defaults(self):
        from imgseg.foundation.exceptions import MissingConfigError

        err = MissingConfigError("pop_size", "SegmentationConfig")
        assert "pop_size" in str(err)
        assert "SegmentationConfig.default()" in str(err)


class TestDomainErrors:
    def test_decode_error_carries_pixel_and_symbol(self):
        from imgseg.foundation.exceptions import DecodeError, GenotypeError

        err = DecodeError("bad gene", pixel=4, symbol=9)
        assert isinstance(err, GenotypeError)
        assert err.details == {"pixel": 4, "symbol": 9}
        assert err.suggestion

    def test_empty_front_error_default_message(self):
        from imgseg.foundation.exceptions import EmptyFrontError, RankingError

        err = EmptyFrontError()
        assert isinstance(err, RankingError)
        assert "empty" in err.message

    def test_image_load_error(self):
        from imgseg.foundation.exceptions import DataError, ImageLoadError

        err = ImageLoadError("/tmp/missing.png", "File does not exist.")
        assert isinstance(err, DataError)
        assert "/tmp/missing.png" in str(err)
        assert err.details == {"path": "/tmp/missing.png"}


def test_all_errors_share_a_base():
    from imgseg.foundation import exceptions

    for name in exceptions.__all__:
        assert issubclass(getattr(exceptions, name), exceptions.ImgSegError)


def test_errors_can_be_caught_as_base():
    from imgseg.foundation.exceptions import ImgSegError, MissingConfigError

    with pytest.raises(ImgSegError):
        raise MissingConfigError("generations")
