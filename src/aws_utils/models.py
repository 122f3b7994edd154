"""
Data records passed between AWS Utils components and printed by the CLI.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

REDACTED = "**********"


class SensitiveString:
    """
    Opaque holder for secret material.

    The value is hidden from str(), repr() and therefore from logs and tracebacks.
    Use reveal() where the cleartext is genuinely needed.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str):
        self._value = value

    def reveal(self) -> str:
        """Return the cleartext value."""
        return self._value

    def __str__(self) -> str:
        return REDACTED

    def __repr__(self) -> str:
        return f"SensitiveString('{REDACTED}')"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SensitiveString):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)


def _secret(value: SensitiveString, reveal: bool) -> str:
    return value.reveal() if reveal else str(value)


@dataclass(frozen=True)
class Credentials:
    """Short-lived AWS credentials resolved for a profile."""

    access_key_id: str
    secret_access_key: SensitiveString
    session_token: SensitiveString
    region: str

    def to_dict(self, reveal: bool = False) -> Dict[str, str]:
        return {
            "access_key_id": self.access_key_id,
            "secret_access_key": _secret(self.secret_access_key, reveal),
            "session_token": _secret(self.session_token, reveal),
            "region": self.region,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credentials":
        return cls(
            access_key_id=data["access_key_id"],
            secret_access_key=SensitiveString(data["secret_access_key"]),
            session_token=SensitiveString(data["session_token"]),
            region=data["region"],
        )


@dataclass(frozen=True)
class RegistryToken:
    """ECR login credentials and the registry host they are valid for."""

    username: str
    password: SensitiveString
    endpoint: str

    def to_dict(self, reveal: bool = False) -> Dict[str, str]:
        return {
            "username": self.username,
            "password": _secret(self.password, reveal),
            "endpoint": self.endpoint,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryToken":
        return cls(
            username=data["username"],
            password=SensitiveString(data["password"]),
            endpoint=data["endpoint"],
        )


@dataclass(frozen=True)
class PublishedImage:
    """A single pushed tag. The reference never carries a digest suffix."""

    reference: str
    digest: Optional[str] = None

    @property
    def pinned_reference(self) -> str:
        """Immutable ``host/name@digest`` reference, or the tag reference if no digest is known."""
        if not self.digest:
            return self.reference
        repository = self.reference.rsplit(":", 1)[0]
        return f"{repository}@{self.digest}"

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "reference": self.reference,
            "digest": self.digest,
            "pinned_reference": self.pinned_reference,
        }


@dataclass
class PublishResult:
    images: List[PublishedImage] = field(default_factory=list)

    @property
    def references(self) -> List[str]:
        return [image.reference for image in self.images]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "references": self.references,
            "images": [image.to_dict() for image in self.images],
        }


@dataclass(frozen=True)
class ErrorEnvelope:
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"message": self.message}


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a CLI command: either a JSON-ready payload or an error envelope."""

    payload: Optional[Dict[str, Any]] = None
    error: Optional[ErrorEnvelope] = None

    def __post_init__(self):
        if (self.payload is None) == (self.error is None):
            raise ValueError("CommandResult needs exactly one of payload or error")

    @classmethod
    def success(cls, payload: Dict[str, Any]) -> "CommandResult":
        return cls(payload=payload)

    @classmethod
    def failure(cls, message: str) -> "CommandResult":
        return cls(error=ErrorEnvelope(message=message))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return self.error.to_dict()
        return self.payload
