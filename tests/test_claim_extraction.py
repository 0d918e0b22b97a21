"""Tests for credential models and claim extraction."""

import logging
import uuid

import pytest

from dataspace_trust.credentials import (
    ClaimExtractor,
    ClaimSet,
    Credential,
    CredentialClaim,
    CredentialSubject,
    ScalarClaim,
)
from dataspace_trust.exceptions import ClaimError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _credential(key: str, value) -> Credential:
    return Credential(
        id="test",
        context=["https://www.w3.org/2018/credentials/v1"],
        issuer=f"did:web:{uuid.uuid4()}",
        credential_subject=CredentialSubject(id="test", claims={key: value}),
    )


def _claims(*credentials) -> dict:
    return {str(uuid.uuid4()): c for c in credentials}


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class TestCredentialModels:
    """Parsing of credential-shaped input."""

    def test_w3c_json_subject_claims(self):
        cred = Credential.model_validate({
            "@context": "https://www.w3.org/2018/credentials/v1",
            "type": "VerifiableCredential",
            "issuer": "did:web:issuer",
            "issuanceDate": "2024-05-01T10:00:00Z",
            "credentialSubject": {
                "id": "did:web:subject",
                "trusted_participants": ["did:web:a"],
            },
        })
        assert cred.credential_subject.id == "did:web:subject"
        assert cred.claim("trusted_participants") == ["did:web:a"]
        assert cred.type == ["VerifiableCredential"]
        assert cred.context == ["https://www.w3.org/2018/credentials/v1"]

    def test_explicit_claims_mapping(self):
        subject = CredentialSubject.model_validate({"id": "s", "claims": {"participant": "p"}})
        assert subject.claims == {"participant": "p"}

    def test_parse_rejects_missing_subject(self):
        with pytest.raises(ClaimError):
            Credential.parse({"issuer": "did:web:issuer"})

    def test_claim_default(self):
        assert _credential("a", 1).claim("missing", "fallback") == "fallback"


class TestClaimSet:
    """Resolution of raw claims into tagged variants."""

    def test_resolves_credential_and_scalar(self):
        cred = _credential("participant", "did:web:a")
        claim_set = ClaimSet.resolve({"cred": cred, "region": "eu"})
        kinds = {e.key: e.kind for e in claim_set.entries}
        assert kinds == {"cred": "credential", "region": "scalar"}
        assert isinstance(claim_set.entries[0], CredentialClaim)
        assert isinstance(claim_set.entries[1], ScalarClaim)
        assert claim_set.credentials == [cred]

    def test_credential_shaped_mapping_is_parsed(self):
        raw = {"credentialSubject": {"id": "s", "participant": "did:web:a"}}
        claim_set = ClaimSet.resolve({"vc": raw})
        assert claim_set.credentials[0].claim("participant") == "did:web:a"

    def test_malformed_credential_is_skipped(self, caplog):
        raw = {"credentialSubject": "not-an-object"}
        with caplog.at_level(logging.WARNING):
            claim_set = ClaimSet.resolve({"vc": raw})
        assert len(claim_set) == 0
        assert "Skipping claim vc" in caplog.text

    def test_none_and_empty(self):
        assert len(ClaimSet.resolve(None)) == 0
        assert len(ClaimSet.resolve({})) == 0

    def test_resolve_is_idempotent(self):
        claim_set = ClaimSet.resolve({"x": 1})
        assert ClaimSet.resolve(claim_set) is claim_set


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------

class TestClaimExtractor:
    """Trusted-participant and participant extraction."""

    def setup_method(self):
        self.extractor = ClaimExtractor()

    def test_overlapping_credentials_are_merged(self):
        first = _credential("trusted_participants", ["did:web:a", "did:web:b"])
        second = _credential("trusted_participants", ["did:web:b", "did:web:c"])
        forward = self.extractor.trusted_participants(_claims(first, second))
        backward = self.extractor.trusted_participants(_claims(second, first))
        assert sorted(forward) == ["did:web:a", "did:web:b", "did:web:c"]
        assert set(forward) == set(backward)
        assert len(forward) == len(set(forward))

    def test_non_string_elements_dropped(self, caplog):
        cred = _credential("trusted_participants", ["did:web:a", 7, {"id": "x"}, None])
        with caplog.at_level(logging.WARNING):
            result = self.extractor.trusted_participants(_claims(cred))
        assert result == ["did:web:a"]
        assert "not a string" in caplog.text

    def test_non_list_value_contributes_nothing(self):
        cred = _credential("trusted_participants", "did:web:a")
        assert self.extractor.trusted_participants(_claims(cred)) == []

    def test_missing_key_contributes_nothing(self):
        cred = _credential("other", ["did:web:a"])
        assert self.extractor.trusted_participants(_claims(cred)) == []

    def test_scalar_claims_ignored(self):
        claims = {str(uuid.uuid4()): str(uuid.uuid4())}
        assert self.extractor.trusted_participants(claims) == []
        assert self.extractor.participants(claims) == []

    def test_raw_json_credentials(self):
        claims = {
            "vc-1": {"credentialSubject": {"trusted_participants": ["did:web:a"]}},
            "vc-2": {"credentialSubject": {"trusted_participants": ["did:web:b"]}},
        }
        assert sorted(self.extractor.trusted_participants(claims)) == ["did:web:a", "did:web:b"]

    def test_participant_singular_key(self):
        claims = _claims(
            _credential("participant", "did:web:a"),
            _credential("participant", "did:web:a"),
            _credential("participant", 12),
        )
        assert self.extractor.participants(claims) == ["did:web:a"]

    def test_custom_keys(self):
        extractor = ClaimExtractor(trusted_participants_key="trustees", participant_key="member")
        claims = _claims(_credential("trustees", ["did:web:t"]), _credential("member", "did:web:m"))
        assert extractor.trusted_participants(claims) == ["did:web:t"]
        assert extractor.participants(claims) == ["did:web:m"]
