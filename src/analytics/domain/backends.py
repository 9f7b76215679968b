"""
Storage backend configuration, resolved once at startup.
"""
import base64
import binascii
import logging
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from omegaconf import DictConfig, OmegaConf
from pydantic import AfterValidator, BaseModel, Field, TypeAdapter, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)


def _check_base64(value: str) -> str:
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("key must be base64 encoded")
    return value


def _check_url(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ValueError(f"URL must start with http:// or https://: {value}")
    return value.rstrip("/")


Base64Key = Annotated[str, AfterValidator(_check_base64)]
HttpUrl = Annotated[str, AfterValidator(_check_url)]


class TableBackend(BaseModel):
    kind: Literal["table"] = "table"
    account: str = Field(..., min_length=3)
    key: Optional[Base64Key] = None
    sas_token: Optional[str] = None
    table_name: str = "analyticsdata"

    @field_validator("sas_token")
    @classmethod
    def normalize_sas(cls, v: Optional[str]) -> Optional[str]:
        if v and not v.startswith("?"):
            return f"?{v}"
        return v

    @model_validator(mode="after")
    def require_credential(self) -> 'TableBackend':
        if not self.key and not self.sas_token:
            raise ValueError("table backend needs an account key or a SAS token")
        return self


class CosmosBackend(BaseModel):
    kind: Literal["cosmos"] = "cosmos"
    endpoint: HttpUrl
    key: Base64Key
    database: str = "noise-pulse"
    container: str = "analytics"


class FunctionsBackend(BaseModel):
    kind: Literal["functions"] = "functions"
    url: HttpUrl
    key: Optional[str] = None


class HttpBackend(BaseModel):
    kind: Literal["http"] = "http"
    url: HttpUrl
    site_id: str = "lafontaine-noise-pulse"
    api_key: Optional[str] = None


class LocalBackend(BaseModel):
    kind: Literal["local"] = "local"
    path: Optional[str] = None
    max_events: int = Field(1000, gt=0)
    max_sessions: int = Field(50, gt=0)


BackendConfig = Annotated[
    Union[TableBackend, CosmosBackend, FunctionsBackend, HttpBackend, LocalBackend],
    Field(discriminator="kind")
]

_backend_adapter = TypeAdapter(BackendConfig)

# Highest priority first
PRIORITY = ("table", "cosmos", "functions", "http")


def parse_backend(payload: Dict[str, Any]) -> BackendConfig:
    """Validates a raw dict carrying a `kind` tag."""
    return _backend_adapter.validate_python(payload)


def _as_dict(settings: Union[Mapping, DictConfig, None]) -> Dict[str, Any]:
    if settings is None:
        return {}
    if isinstance(settings, DictConfig):
        return OmegaConf.to_container(settings, resolve=True)
    return dict(settings)


def _present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def _selected(kind: str, section: Dict[str, Any]) -> bool:
    """Whether the credentials for a backend kind are present at all."""
    if kind == "table":
        return _present(section.get("account")) and (
            _present(section.get("key")) or _present(section.get("sas_token"))
        )
    if kind == "cosmos":
        return _present(section.get("endpoint")) and _present(section.get("key"))
    return _present(section.get("url"))


def _candidate(kind: str, section: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "kind": kind,
        **{k: v for k, v in section.items() if _present(v)}
    }


def local_backend(settings: Union[Mapping, DictConfig, None]) -> LocalBackend:
    section = _as_dict(settings).get("local") or {}
    return LocalBackend(**{k: v for k, v in section.items() if _present(v)})


def resolve_backend_config(settings: Union[Mapping, DictConfig, None]) -> BackendConfig:
    """
    Picks the storage backend from whichever credentials are present.
    Priority: table, cosmos, functions, http, then local. Credentials that
    are present but malformed degrade to local with a warning.
    """
    raw = _as_dict(settings)
    for kind in PRIORITY:
        section = raw.get(kind) or {}
        if not _selected(kind, section):
            continue
        try:
            backend = parse_backend(_candidate(kind, section))
        except ValidationError as e:
            logger.warning(
                f"Storage backend '{kind}' is misconfigured, using local buffer: "
                f"{e.error_count()} error(s)"
            )
            return local_backend(raw)
        logger.info(f"Storage backend: {kind}")
        return backend

    logger.info("Storage backend: local")
    return local_backend(raw)


def configured_backends(settings: Union[Mapping, DictConfig, None]) -> List[BackendConfig]:
    """Every well-formed remote backend in priority order."""
    raw = _as_dict(settings)
    backends = []
    for kind in PRIORITY:
        section = raw.get(kind) or {}
        if not _selected(kind, section):
            continue
        try:
            backends.append(parse_backend(_candidate(kind, section)))
        except ValidationError:
            logger.warning(f"Skipping misconfigured storage backend '{kind}'")
    return backends
