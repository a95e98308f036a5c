import random

import pytest

import s1c1_hex_to_base64
import s1c2_fixed_xor
import s1c3_single_byte_xor_cipher
import s1c4_detect_single_char_xor
import s1c5_repeating_key_xor
import s1c6_break_repeating_key_xor
from xorcrack import base64_encode, hex_encode, repeating_key_xor, single_byte_xor

KEY = bytes([0x4b, 0xb7, 0x1e])


def test_s1c1(capsys):
    s1c1_hex_to_base64.main()
    assert capsys.readouterr().out == "SSdtIGtpbGxpbmcgeW91ciBicmFpbiBsaWtlIGEgcG9pc29ub3VzIG11c2hyb29t\n"


def test_s1c2(capsys):
    s1c2_fixed_xor.main()
    assert capsys.readouterr().out == "746865206b696420646f6e277420706c6179\n"


def test_s1c3(capsys):
    s1c3_single_byte_xor_cipher.main([])
    out = capsys.readouterr().out
    assert "Key: 0x58" in out
    assert "Cooking MC's like a pound of bacon" in out


def test_s1c3_rejects_bad_hex(capsys):
    with pytest.raises(SystemExit) as e:
        s1c3_single_byte_xor_cipher.main(["not hex"])
    assert e.value.code == 2
    assert "Bad hex input" in capsys.readouterr().err


def test_s1c4(tmp_path, capsys):
    rng = random.Random(4)
    lines = [hex_encode(bytes(rng.randrange(256) for _ in range(30))) for _ in range(10)]
    lines.insert(3, hex_encode(single_byte_xor(b"Now that the party is jumping\n", 0x35)))
    path = tmp_path / "s1c04.txt"
    path.write_text("\n".join(lines) + "\n")

    s1c4_detect_single_char_xor.main([str(path)])
    out = capsys.readouterr().out
    assert "Key: 0x35" in out
    assert "Now that the party is jumping" in out


def test_s1c5(capsys):
    s1c5_repeating_key_xor.main()
    assert capsys.readouterr().out.startswith("0b3637272a2b2e63622c2e69692a23693a2a3c")


@pytest.mark.parametrize("encoding,encode", [
    ("base64", base64_encode),
    ("hex", hex_encode),
])
def test_s1c6(tmp_path, capsys, english_text, encoding, encode):
    path = tmp_path / "ciphertext.txt"
    path.write_text(encode(repeating_key_xor(english_text, KEY)))

    s1c6_break_repeating_key_xor.main([str(path), "--encoding", encoding, "--max-key-length", "12"])
    out = capsys.readouterr().out
    assert "Keysize 3:" in out or "Keysize 6:" in out
    assert english_text.decode() in out


def test_s1c6_raw_with_known_key_length(tmp_path, capsys, english_text):
    path = tmp_path / "ciphertext.bin"
    path.write_bytes(repeating_key_xor(english_text, KEY))

    s1c6_break_repeating_key_xor.main([str(path), "--encoding", "raw", "--key-length", "3", "--verbose"])
    assert f"Key: {KEY!r}" in capsys.readouterr().out


def test_s1c6_rejects_bad_base64(tmp_path, capsys):
    path = tmp_path / "ciphertext.txt"
    path.write_text("this is *not* base64")

    with pytest.raises(SystemExit) as e:
        s1c6_break_repeating_key_xor.main([str(path)])
    assert e.value.code == 2
    assert "Bad base64 input" in capsys.readouterr().err


def test_s1c6_too_short_to_break(tmp_path, capsys):
    path = tmp_path / "ciphertext.bin"
    path.write_bytes(b"A")

    s1c6_break_repeating_key_xor.main([str(path), "--encoding", "raw"])
    assert "Could not recover a key" in capsys.readouterr().out
