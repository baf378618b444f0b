from distribution.order.identity import format_order_id, parse_sequence


class TestFormatOrderId:
    def test_zero_padded_to_three_digits(self):
        assert format_order_id("ORD", 1) == "ORD-001"
        assert format_order_id("ORD", 42) == "ORD-042"

    def test_wider_numbers_are_not_truncated(self):
        assert format_order_id("ORD", 1234) == "ORD-1234"


class TestParseSequence:
    def test_parses_suffix(self):
        assert parse_sequence("ORD-017", "ORD") == 17

    def test_malformed_id_returns_none(self):
        assert parse_sequence("ORD-abc", "ORD") is None
        assert parse_sequence("17", "ORD") is None
        assert parse_sequence(None, "ORD") is None

    def test_other_prefix_returns_none(self):
        assert parse_sequence("INV-003", "ORD") is None
