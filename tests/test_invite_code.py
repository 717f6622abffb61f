from buddylifts.services.invite_code import ALPHABET, generate_invite_code, is_valid_invite_code


def test_generated_codes_are_valid():
    for _ in range(50):
        code = generate_invite_code()
        assert len(code) == 8
        assert set(code) <= set(ALPHABET)
        assert is_valid_invite_code(code)


def test_invalid_codes():
    assert not is_valid_invite_code("ABCDEFG")  # zu kurz
    assert not is_valid_invite_code("ABCDEFGHJ")  # zu lang
    assert not is_valid_invite_code("ABCDEFG0")  # 0 ist nicht im Alphabet
    assert not is_valid_invite_code("abcdefgh")
    assert not is_valid_invite_code("ABCDEFGH\n")
    assert not is_valid_invite_code(None)
