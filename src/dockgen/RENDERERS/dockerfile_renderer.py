# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Renders instructions into Dockerfile text.
"""
import json
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from jinja2 import Template

from ..MODELS.instructions import (
    Add, Arg, BaseImage, Cmd, Comment, Copy, EntryPoint, Env, Expose,
    HealthCheck, Instruction, Label, Maintainer, OnBuild, Run, Shell,
    StopSignal, User, Volume, WorkDir,
)

logger = logging.getLogger(__name__)

# One block per instruction; a block marked as spaced gets a blank line first.
DOCKERFILE_TEMPLATE = (
    "{% for line, spaced in blocks %}"
    "{% if spaced and not loop.first %}\n{% endif %}"
    "{{ line }}\n"
    "{% endfor %}"
)

SPACED_INSTRUCTIONS = (Comment, Maintainer, EntryPoint, Cmd)


def _exec_form(args: Iterable[str]) -> str:
    """
    Formats arguments as a JSON array: ["a", "b"].
    """
    return json.dumps(list(args), ensure_ascii=False)


def _flag(name: str, value: Optional[object]) -> List[str]:
    return [f"--{name}={value}"] if value is not None else []


def _from(inst: BaseImage) -> str:
    line = f"FROM {inst.image}"
    if inst.tag:
        line += f":{inst.tag}"
    if inst.digest:
        line += f"@{inst.digest}"
    if inst.alias:
        line += f" AS {inst.alias}"
    return line


def _copy(inst: Copy) -> str:
    parts = ["COPY"] + _flag("from", inst.from_stage) + _flag("chown", inst.chown)
    return " ".join(parts + [inst.src, inst.dst])


def _add(inst: Add) -> str:
    parts = ["ADD"] + _flag("chown", inst.chown)
    return " ".join(parts + [inst.src, inst.dst])


def _expose(inst: Expose) -> str:
    if inst.protocol:
        return f"EXPOSE {inst.port}/{inst.protocol}"
    return f"EXPOSE {inst.port}"


def _user(inst: User) -> str:
    if inst.group:
        return f"USER {inst.user}:{inst.group}"
    return f"USER {inst.user}"


def _quoted(value: str) -> str:
    # Multi-line values continue on the next line
    value = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\\n")
    return f'"{value}"'


def _arg(inst: Arg) -> str:
    if inst.value is None:
        return f"ARG {inst.name}"
    return f"ARG {inst.name}={_quoted(inst.value)}"


def _healthcheck(inst: HealthCheck) -> str:
    if inst.cmd is None:
        return "HEALTHCHECK NONE"
    parts = (
        ["HEALTHCHECK"]
        + _flag("interval", inst.interval)
        + _flag("timeout", inst.timeout)
        + _flag("start-period", inst.start_period)
        + _flag("retries", inst.retries)
    )
    return " ".join(parts + [f"CMD {_exec_form(inst.cmd)}"])


_FORMATTERS: Dict[type, Callable] = {
    BaseImage: _from,
    Comment: lambda inst: f"# {inst.text}",
    Run: lambda inst: " ".join(["RUN", *inst.args]),
    Copy: _copy,
    Add: _add,
    Expose: _expose,
    Env: lambda inst: "ENV " + " ".join(f"{k}={v}" for k, v in inst.pairs),
    Label: lambda inst: "LABEL " + " ".join(f"{k}={_quoted(v)}" for k, v in inst.pairs),
    Volume: lambda inst: f"VOLUME {_exec_form(inst.paths)}",
    User: _user,
    WorkDir: lambda inst: f"WORKDIR {inst.path}",
    EntryPoint: lambda inst: f"ENTRYPOINT {_exec_form(inst.args)}",
    Cmd: lambda inst: f"CMD {_exec_form(inst.args)}",
    StopSignal: lambda inst: f"STOPSIGNAL {inst.signal}",
    Arg: _arg,
    Shell: lambda inst: f"SHELL {_exec_form(inst.args)}",
    HealthCheck: _healthcheck,
    Maintainer: lambda inst: f"MAINTAINER {inst.name}",
    OnBuild: lambda inst: f"ONBUILD {render_instruction(inst.instruction)}",
}


def render_instruction(instruction: Instruction) -> str:
    """
    Renders a single instruction as one line, without a trailing newline.

    :param instruction: Any instruction model.
    :return: The formatted line.
    :raises TypeError: If the object is not a known instruction.
    """
    formatter = _FORMATTERS.get(type(instruction))
    if formatter is None:
        raise TypeError(f"Unsupported instruction type: {type(instruction).__name__}")
    return formatter(instruction)


class DockerfileRenderer:
    """
    Lays out rendered instructions as a complete Dockerfile.
    """

    def __init__(self):
        self.template = Template(DOCKERFILE_TEMPLATE)

    def blocks(self, instructions: Iterable[Instruction]) -> List[Tuple[str, bool]]:
        """
        Pairs each rendered line with whether it is preceded by a blank line.
        """
        return [
            (render_instruction(inst), isinstance(inst, SPACED_INSTRUCTIONS))
            for inst in instructions
        ]

    def render(self, instructions: Iterable[Instruction]) -> str:
        """
        Renders instructions in order; every line ends with a newline.

        :param instructions: Instructions, the base image first.
        :return: The Dockerfile text.
        """
        blocks = self.blocks(instructions)
        logger.debug("Rendering %d instructions", len(blocks))
        return self.template.render(blocks=blocks)
