"""Axiom 로깅 미들웨어 헬퍼 테스트 — 민감 정보 마스킹.

Axiom logging middleware helper tests — masking and truncation of what is
shipped to Axiom.
"""

from tawatch.middleware.axiom_logging import _mask_dict, _truncate


class TestMasking:
    """민감 필드 마스킹 테스트."""

    def test_masks_credentials(self):
        masked = _mask_dict({"email": "a@b.vn", "password": "secret123", "refresh_token": "eyJ..."})
        assert masked == {"email": "a@b.vn", "password": "***", "refresh_token": "***"}

    def test_masks_momo_signature_and_keys(self):
        masked = _mask_dict({"orderId": "TW-1", "signature": "abc", "accessKey": "k", "amount": 330000})
        assert masked["signature"] == "***"
        assert masked["accessKey"] == "***"
        assert masked["amount"] == 330000

    def test_nested_structures(self):
        masked = _mask_dict({"user": {"new_password": "x"}, "items": [{"api_key": "y", "sku": "SKU-1"}]})
        assert masked["user"]["new_password"] == "***"
        assert masked["items"][0] == {"api_key": "***", "sku": "SKU-1"}

    def test_long_lists_are_cut(self):
        assert len(_mask_dict(list(range(100)))) == 20


class TestTruncate:
    """로그 크기 제한 테스트."""

    def test_short_value_unchanged(self):
        assert _truncate({"a": 1}) == {"a": 1}

    def test_long_value_truncated(self):
        result = _truncate("x" * 3000)
        assert result.endswith("...(truncated)")
        assert len(result) == 2000 + len("...(truncated)")
