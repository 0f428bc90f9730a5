"""Pydantic models for layer content hashes.

Hashes are rendered as '<algorithm>:<hex>', the form image manifests and
configs use for diff IDs and digests.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Hex digest length per supported algorithm
DIGEST_HEX_LENGTHS = {
    "sha256": 64,
    "sha384": 96,
    "sha512": 128,
}


class Hash(BaseModel):
    """An algorithm-tagged content hash."""

    model_config = ConfigDict(frozen=True)

    algorithm: str = Field(pattern=r"^[a-z0-9]+$", description="Digest algorithm name")
    hex: str = Field(pattern=r"^[0-9a-f]+$", description="Lowercase hex digest")

    @model_validator(mode="after")
    def validate_hex_length(self) -> "Hash":
        """Ensure the hex digest has the length the algorithm produces."""
        expected = DIGEST_HEX_LENGTHS.get(self.algorithm)
        if expected is None:
            raise ValueError(f"Unsupported hash algorithm: {self.algorithm}")
        if len(self.hex) != expected:
            raise ValueError(
                f"{self.algorithm} digest must be {expected} hex characters, "
                f"got {len(self.hex)}"
            )
        return self

    @classmethod
    def parse(cls, value: str) -> "Hash":
        """Parse a hash from its '<algorithm>:<hex>' string form.

        Args:
            value: Hash string (e.g., "sha256:e3b0c442...")

        Returns:
            Parsed Hash

        Raises:
            ValueError: If the string has no ':' separator
            pydantic.ValidationError: If algorithm or digest are malformed
        """
        algorithm, sep, hex_digest = value.partition(":")
        if not sep:
            raise ValueError(f"Cannot parse hash '{value}': expected '<algorithm>:<hex>'")
        return cls(algorithm=algorithm, hex=hex_digest)

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hex}"


class LayerHashes(BaseModel):
    """Hashes an image manifest needs for one layer."""

    model_config = ConfigDict(frozen=True)

    diff_id: Hash = Field(description="Hash of the uncompressed layer archive")
    digest: Hash = Field(description="Hash of the gzip-compressed layer archive")
