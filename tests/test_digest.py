"""
chainprim Digest Tests
"""

import pytest

from chainprim.core.changes_trie import (
    ChangesTrieConfiguration,
    ChangesTrieSignal,
    ChangesTrieSignalKind,
)
from chainprim.core.digest import (
    Digest,
    DigestItem,
    DigestItemRef,
    DigestItemType,
    ChangesTrieRootDigest,
    PreRuntimeDigest,
    ConsensusDigest,
    SealDigest,
    ChangesTrieSignalDigest,
    OtherDigest,
    encode_digest,
)
from chainprim.core.serialization import decode_compact, encode_compact
from chainprim.core.types import Hash
from chainprim.errors import (
    InvalidDiscriminantError,
    InvalidLengthError,
    MalformedError,
    TruncatedError,
)


class TestDigestItemType:
    """Tests for explicit wire tags."""

    def test_values(self):
        """Test every tag keeps its assigned value."""
        assert DigestItemType.OTHER == 0
        assert DigestItemType.CHANGES_TRIE_ROOT == 2
        assert DigestItemType.CONSENSUS == 4
        assert DigestItemType.SEAL == 5
        assert DigestItemType.PRE_RUNTIME == 6
        assert DigestItemType.CHANGES_TRIE_SIGNAL == 7

    def test_reserved_values_unused(self):
        """Test 1 and 3 are not assigned."""
        assert {t.value for t in DigestItemType}.isdisjoint({1, 3})


class TestDigestItemEncoding:
    """Tests for the wire shape of each variant."""

    def test_pre_runtime(self):
        item = PreRuntimeDigest(b"AURA", b"\x01\x02")
        assert item.encode() == bytes.fromhex("18" "41555241" "08" "0102")

    def test_consensus(self):
        item = ConsensusDigest(b"FRNK", b"")
        assert item.encode() == bytes.fromhex("10" "46524e4b" "00")

    def test_seal(self):
        item = SealDigest(b"BABE", b"\xff")
        assert item.encode() == bytes.fromhex("14" "42414245" "04" "ff")

    def test_changes_trie_root(self, mock_hash):
        item = ChangesTrieRootDigest(mock_hash)
        assert item.encode() == b"\x08" + mock_hash.data

    def test_changes_trie_signal_with_configuration(self):
        signal = ChangesTrieSignal.new_configuration(ChangesTrieConfiguration(4, 2))
        item = ChangesTrieSignalDigest(signal)
        assert item.encode() == bytes.fromhex("1c" "00" "01" "04000000" "02000000")

    def test_changes_trie_signal_without_configuration(self):
        item = ChangesTrieSignalDigest(ChangesTrieSignal.new_configuration(None))
        assert item.encode() == bytes.fromhex("1c" "00" "00")

    def test_other(self):
        assert OtherDigest(b"\xaa").encode() == bytes.fromhex("00" "04" "aa")

    def test_deterministic(self, full_digest):
        """Test repeated encodes of equal values yield identical bytes."""
        copy = Digest(list(full_digest.logs))
        assert full_digest.encode() == full_digest.encode() == copy.encode()


class TestDigestItemDecoding:
    """Tests for decoding digest items."""

    def test_roundtrip_every_variant(self, full_digest):
        """Test decode(encode(x)) == x for each variant."""
        for item in full_digest:
            decoded = DigestItem.decode(item.encode())
            assert decoded == item
            assert type(decoded) is type(item)

    def test_variants_with_same_payload_differ(self):
        """Test equality includes the variant."""
        assert PreRuntimeDigest(b"AURA", b"x") != ConsensusDigest(b"AURA", b"x")

    @pytest.mark.parametrize("tag", [1, 3, 8, 9, 63, 64, 1000, 0xFFFFFFFF, 1 << 32, (1 << 536) - 1])
    def test_unknown_tag(self, tag):
        """Test tags outside {0,2,4,5,6,7} raise InvalidDiscriminantError."""
        data = encode_compact(tag) + b"\x00" * 40
        with pytest.raises(InvalidDiscriminantError) as exc_info:
            DigestItem.decode(data)
        assert exc_info.value.details["value"] == tag

    def test_reserved_tag_message(self):
        with pytest.raises(InvalidDiscriminantError, match="reserved"):
            DigestItem.decode(encode_compact(1))

    @pytest.mark.timeout(10)
    def test_every_single_byte_input(self):
        """Test no one-byte input crashes the decoder."""
        for value in range(256):
            try:
                DigestItem.decode(bytes([value]))
            except (InvalidDiscriminantError, TruncatedError, InvalidLengthError, MalformedError):
                pass

    def test_truncated_engine_id(self):
        with pytest.raises(TruncatedError):
            DigestItem.decode(bytes.fromhex("18" "4155"))

    def test_truncated_root(self):
        with pytest.raises(TruncatedError):
            DigestItem.decode(b"\x08" + bytes(16))

    def test_payload_length_too_long(self):
        with pytest.raises(InvalidLengthError):
            DigestItem.decode(bytes.fromhex("18" "41555241" "10" "0102"))

    def test_unknown_signal_kind(self):
        with pytest.raises(InvalidDiscriminantError):
            DigestItem.decode(bytes.fromhex("1c" "01" "00"))

    def test_bad_option_flag(self):
        with pytest.raises(MalformedError):
            DigestItem.decode(bytes.fromhex("1c" "00" "02"))

    def test_trailing_bytes(self):
        with pytest.raises(MalformedError):
            DigestItem.decode(bytes.fromhex("00" "04" "aa" "bb"))


class TestDigestItemRef:
    """Tests for the borrowing representation."""

    def test_ref_matches_owned(self, full_digest):
        """Test dref() views encode identically to the owning items."""
        for item in full_digest:
            assert item.dref().encode() == item.encode()

    def test_ref_from_foreign_buffers(self):
        """Test views over caller-owned buffers encode like owned items."""
        buffer = bytearray(b"..AURA\x01\x02..")
        view = memoryview(buffer)
        ref = DigestItemRef.pre_runtime(view[2:6], view[6:8])
        assert ref.encode() == PreRuntimeDigest(b"AURA", b"\x01\x02").encode()

    def test_ref_does_not_copy(self):
        """Test the view tracks the caller's buffer until it is encoded."""
        payload = bytearray(b"\x00\x00")
        ref = DigestItemRef.seal(b"BABE", payload)
        payload[0] = 0x7F
        assert ref.encode() == SealDigest(b"BABE", b"\x7f\x00").encode()

    @pytest.mark.parametrize("make_ref,owned", [
        (lambda: DigestItemRef.changes_trie_root(Hash(b"\x01" * 32)),
         ChangesTrieRootDigest(Hash(b"\x01" * 32))),
        (lambda: DigestItemRef.consensus(b"FRNK", b"abc"),
         ConsensusDigest(b"FRNK", b"abc")),
        (lambda: DigestItemRef.changes_trie_signal(ChangesTrieSignal()),
         ChangesTrieSignalDigest(ChangesTrieSignal())),
        (lambda: DigestItemRef.other(bytearray(b"zz")),
         OtherDigest(b"zz")),
    ])
    def test_to_owned(self, make_ref, owned):
        """Test views copy into the matching owning variant."""
        ref = make_ref()
        assert ref.to_owned() == owned
        assert ref.encode() == owned.encode()

    def test_bad_engine_id(self):
        with pytest.raises(ValueError):
            DigestItemRef.pre_runtime(b"AURA1", b"")
        with pytest.raises(ValueError):
            PreRuntimeDigest(b"AU", b"")

    def test_encode_digest_from_refs(self, full_digest):
        """Test a digest built from views matches the owned digest."""
        refs = [item.dref() for item in full_digest]
        assert encode_digest(refs) == full_digest.encode()


class TestAccessors:
    """Tests for the as_* accessors."""

    def test_matching_accessor(self, mock_hash):
        signal = ChangesTrieSignal()
        assert ChangesTrieRootDigest(mock_hash).as_changes_trie_root() == mock_hash
        assert PreRuntimeDigest(b"AURA", b"1").as_pre_runtime() == (b"AURA", b"1")
        assert ConsensusDigest(b"AURA", b"2").as_consensus() == (b"AURA", b"2")
        assert SealDigest(b"AURA", b"3").as_seal() == (b"AURA", b"3")
        assert ChangesTrieSignalDigest(signal).as_changes_trie_signal() == signal
        assert OtherDigest(b"4").as_other() == b"4"

    def test_other_accessors_return_none(self):
        item = PreRuntimeDigest(b"AURA", b"1")
        assert item.as_seal() is None
        assert item.as_consensus() is None
        assert item.as_other() is None
        assert item.as_changes_trie_root() is None
        assert item.as_changes_trie_signal() is None


class TestDigest:
    """Tests for the Digest container."""

    def test_empty(self):
        assert Digest().encode() == b"\x00"
        assert Digest.decode(b"\x00") == Digest()
        assert len(Digest()) == 0

    def test_pre_runtime_roundtrip(self):
        """Test a single PreRuntime item round-trips and carries tag 6."""
        digest = Digest([PreRuntimeDigest(b"AURA", bytes([0x01, 0x02]))])
        encoded = digest.encode()
        assert encoded == bytes.fromhex("04" "18" "41555241" "08" "0102")
        assert Digest.decode(encoded) == digest
        tag, _ = decode_compact(encoded, 1)
        assert tag == 6
        assert DigestItemType(tag) is DigestItemType.PRE_RUNTIME

    def test_full_roundtrip(self, full_digest):
        assert Digest.decode(full_digest.encode()) == full_digest

    def test_list_input_becomes_tuple(self):
        digest = Digest([OtherDigest(b"")])
        assert isinstance(digest.logs, tuple)

    def test_push_returns_new_digest(self):
        digest = Digest()
        pushed = digest.push(OtherDigest(b"a"))
        assert len(digest) == 0
        assert pushed.logs == (OtherDigest(b"a"),)

    def test_pre_runtime_lookup(self, full_digest):
        assert full_digest.pre_runtime(b"BABE") == b"\x01\x02\x03"
        assert full_digest.pre_runtime(b"AURA") is None

    def test_seal(self, full_digest):
        assert full_digest.seal() == SealDigest(b"BABE", b"\x55" * 64)
        assert Digest([OtherDigest(b"")]).seal() is None
        assert Digest().seal() is None

    def test_convert_first(self, full_digest):
        assert full_digest.convert_first(lambda item: item.as_other()) == b"\xde\xad"
        assert Digest().convert_first(lambda item: item.as_other()) is None

    def test_count_exceeds_input(self):
        with pytest.raises(InvalidLengthError):
            Digest.decode(b"\x08\x00")

    def test_bad_tag_inside_digest(self):
        with pytest.raises(InvalidDiscriminantError):
            Digest.decode(bytes.fromhex("04" "0c"))

    def test_to_dict(self):
        digest = Digest([PreRuntimeDigest(b"AURA", b"\x01")])
        assert digest.to_dict() == {
            "logs": [{"type": "pre_runtime", "engine_id": "41555241", "data": "01"}]
        }


class TestChangesTrie:
    """Tests for the changes trie signal types."""

    def test_configuration_default(self):
        assert ChangesTrieConfiguration() == ChangesTrieConfiguration(0, 0)
        assert ChangesTrieConfiguration().encode() == bytes(8)

    def test_configuration_roundtrip(self):
        config = ChangesTrieConfiguration(digest_interval=0xFFFFFFFF, digest_levels=7)
        assert ChangesTrieConfiguration.decode(config.encode()) == config

    def test_signal_roundtrip(self):
        for config in (None, ChangesTrieConfiguration(16, 3)):
            signal = ChangesTrieSignal.new_configuration(config)
            assert signal.kind is ChangesTrieSignalKind.NEW_CONFIGURATION
            assert ChangesTrieSignal.decode(signal.encode()) == signal

    def test_signal_truncated_configuration(self):
        with pytest.raises(TruncatedError):
            ChangesTrieSignal.decode(bytes.fromhex("00" "01" "040000"))
