"""
Models for the instructions of a generated Dockerfile.

Every instruction kind is its own immutable record; ``Instruction`` is the
closed union over all of them.
"""
from typing import ClassVar, Iterable, Mapping, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .image_reference import ImageReference


def _to_pairs(value):
    """
    Normalizes mappings, 'K=V' strings and (k, v) sequences into a list of pairs.
    """
    if value is None:
        return []
    if isinstance(value, Mapping):
        value = list(value.items())
    pairs = []
    for item in value:
        if isinstance(item, str):
            if '=' not in item:
                raise ValueError(f"Expected KEY=VALUE, got {item!r}")
            key, val = item.split('=', 1)
            pairs.append((key, val))
        else:
            key, val = item
            if key is None or val is None:
                raise ValueError(f"Missing key or value in {item!r}")
            pairs.append((str(key), str(val)))
    return pairs


class _InstructionModel(BaseModel):
    """
    Common configuration for instruction records.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    keyword: ClassVar[str] = ""


class BaseImage(_InstructionModel):
    """
    The FROM instruction. Tag and digest are independent of each other.
    """
    keyword: ClassVar[str] = "FROM"

    image: str
    tag: Optional[str] = None
    digest: Optional[str] = None
    alias: Optional[str] = None

    @classmethod
    def parse(cls, reference: str) -> "BaseImage":
        """
        Builds a BaseImage from a reference such as 'rust:1.75 AS builder'.
        """
        ref = ImageReference.parse(reference)
        return cls(image=ref.name, tag=ref.tag, digest=ref.digest, alias=ref.alias)


class Comment(_InstructionModel):
    keyword: ClassVar[str] = "#"

    text: str


class Run(_InstructionModel):
    """
    Shell-form RUN. Arguments are joined with spaces and never escaped.
    """
    keyword: ClassVar[str] = "RUN"

    args: Tuple[str, ...]


class Copy(_InstructionModel):
    keyword: ClassVar[str] = "COPY"

    src: str
    dst: str
    from_stage: Optional[str] = Field(default=None, alias="from")
    chown: Optional[str] = None


class Add(_InstructionModel):
    keyword: ClassVar[str] = "ADD"

    src: str
    dst: str
    chown: Optional[str] = None


class Expose(_InstructionModel):
    keyword: ClassVar[str] = "EXPOSE"

    port: int = Field(ge=0, le=65535)
    protocol: Optional[str] = None


class Env(_InstructionModel):
    """
    ENV with ordered key/value pairs. Duplicate keys are kept as written.
    """
    keyword: ClassVar[str] = "ENV"

    pairs: Tuple[Tuple[str, str], ...]

    @field_validator("pairs", mode="before")
    @classmethod
    def normalize_pairs(cls, value):
        return _to_pairs(value)

    @classmethod
    def of(cls, pairs: Union[Mapping[str, str], Iterable, None] = None, **kwargs: str) -> "Env":
        """
        Builds an Env from a mapping or pairs, followed by any keyword pairs.
        """
        return cls(pairs=_to_pairs(pairs) + list(kwargs.items()))


class Label(_InstructionModel):
    """
    LABEL with ordered key/value pairs.
    """
    keyword: ClassVar[str] = "LABEL"

    pairs: Tuple[Tuple[str, str], ...]

    @field_validator("pairs", mode="before")
    @classmethod
    def normalize_pairs(cls, value):
        return _to_pairs(value)

    @classmethod
    def of(cls, pairs: Union[Mapping[str, str], Iterable, None] = None, **kwargs: str) -> "Label":
        return cls(pairs=_to_pairs(pairs) + list(kwargs.items()))


class Volume(_InstructionModel):
    keyword: ClassVar[str] = "VOLUME"

    paths: Tuple[str, ...]


class User(_InstructionModel):
    keyword: ClassVar[str] = "USER"

    user: str
    group: Optional[str] = None


class WorkDir(_InstructionModel):
    keyword: ClassVar[str] = "WORKDIR"

    path: str


class EntryPoint(_InstructionModel):
    keyword: ClassVar[str] = "ENTRYPOINT"

    args: Tuple[str, ...]


class Cmd(_InstructionModel):
    keyword: ClassVar[str] = "CMD"

    args: Tuple[str, ...]


class StopSignal(_InstructionModel):
    keyword: ClassVar[str] = "STOPSIGNAL"

    signal: str


class Arg(_InstructionModel):
    """
    Build-time variable, optionally with a default value.
    """
    keyword: ClassVar[str] = "ARG"

    name: str
    value: Optional[str] = None


class Shell(_InstructionModel):
    keyword: ClassVar[str] = "SHELL"

    args: Tuple[str, ...]


class HealthCheck(_InstructionModel):
    """
    HEALTHCHECK instruction. A check without a command disables any
    health check inherited from the base image (HEALTHCHECK NONE).

    Durations are passed through verbatim, e.g. '30s' or '1m30s'.
    """
    keyword: ClassVar[str] = "HEALTHCHECK"

    cmd: Optional[Tuple[str, ...]] = None
    interval: Optional[str] = None
    timeout: Optional[str] = None
    start_period: Optional[str] = None
    retries: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def options_need_command(self):
        if self.cmd is None and any(
            option is not None
            for option in (self.interval, self.timeout, self.start_period, self.retries)
        ):
            raise ValueError("HEALTHCHECK options require a command")
        return self


class Maintainer(_InstructionModel):
    """
    Deprecated by the build tools in favour of LABEL maintainer=...,
    still accepted by them.
    """
    keyword: ClassVar[str] = "MAINTAINER"

    name: str


TriggerInstruction = Union[
    Run, Copy, Add, Expose, Env, Label, Volume, User, WorkDir,
    EntryPoint, Cmd, StopSignal, Arg, Shell, HealthCheck,
]


class OnBuild(_InstructionModel):
    """
    Wraps an instruction that runs when the image is used as a base.
    """
    keyword: ClassVar[str] = "ONBUILD"

    instruction: TriggerInstruction


Instruction = Union[
    BaseImage, Comment, Run, Copy, Add, Expose, Env, Label, Volume, User,
    WorkDir, EntryPoint, Cmd, StopSignal, Arg, Shell, HealthCheck, OnBuild,
    Maintainer,
]
