import re

from disaster_reports.services.codes import CODE_ALPHABET, CodeGenerator, generate_code

CODE_PATTERN = re.compile(r"^QA-\d{6}-[A-Z0-9]{3}$")


def test_code_shape():
    code = generate_code()
    assert CODE_PATTERN.match(code), code


def test_stamp_is_last_six_digits_of_millis():
    generator = CodeGenerator("QA", clock=lambda: 1_700_000_123_456)
    assert generator.generate().startswith("QA-123456-")


def test_short_clock_values_are_zero_padded():
    generator = CodeGenerator("QA", clock=lambda: 42)
    assert generator.generate().startswith("QA-000042-")


def test_custom_prefix_is_uppercased():
    code = CodeGenerator("sb").generate()
    assert re.match(r"^SB-\d{6}-[A-Z0-9]{3}$", code)


def test_no_collisions_over_ten_thousand_sequential_codes():
    generator = CodeGenerator()
    codes = [generator.generate() for _ in range(10_000)]
    assert len(set(codes)) == len(codes)
    assert all(CODE_PATTERN.match(code) for code in codes)


def test_same_millisecond_codes_do_not_repeat():
    # Frozen clock and a random source that keeps proposing the same suffix first.
    picks = iter("AAA" + "AAA" + "AAB" + "ZZZ" * 10)
    generator = CodeGenerator("QA", clock=lambda: 5, choice=lambda _: next(picks))

    first = generator.generate()
    second = generator.generate()

    assert first == "QA-000005-AAA"
    assert second == "QA-000005-AAB"


def test_suffix_uses_base36_alphabet():
    assert CODE_ALPHABET == "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
