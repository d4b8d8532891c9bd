import pytest

from oracle_avs.crypto.signer import SECP256K1_N, Signer
from oracle_avs.errors import ConfigurationError

# Well-known development key (first account of the default Anvil/Hardhat mnemonic).
DEV_KEY = "ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def test_signer_derives_checksummed_address():
    assert Signer(DEV_KEY).address == DEV_ADDRESS
    assert Signer("0x" + DEV_KEY).address == DEV_ADDRESS


def test_signer_produces_65_byte_signatures():
    sig = Signer(DEV_KEY).sign(b"\x11" * 32)
    assert len(sig) == 65
    assert sig[64] in (27, 28)


def test_signer_is_deterministic():
    signer = Signer(DEV_KEY)
    assert signer.sign(b"\x22" * 32) == signer.sign(b"\x22" * 32)


def test_signer_rejects_non_32_byte_hash():
    with pytest.raises(ValueError):
        Signer(DEV_KEY).sign(b"\x00" * 31)


@pytest.mark.parametrize(
    "bad_key",
    [
        "",
        "not-hex",
        "abcd",
        "00" * 32,
        f"{SECP256K1_N:064x}",
    ],
)
def test_signer_rejects_invalid_keys(bad_key):
    with pytest.raises(ConfigurationError):
        Signer(bad_key)


def test_signer_repr_hides_key():
    assert DEV_KEY not in repr(Signer(DEV_KEY))
