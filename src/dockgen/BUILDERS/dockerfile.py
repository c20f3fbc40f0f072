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
Fluent builder for Dockerfile documents.
"""
import logging
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..errors import DuplicateInstructionError
from ..MODELS.instructions import (
    Add, Arg, BaseImage, Cmd, Comment, Copy, EntryPoint, Env, Expose,
    HealthCheck, Instruction, Label, Maintainer, OnBuild, Run, Shell,
    StopSignal, User, Volume, WorkDir,
)
from ..RENDERERS.dockerfile_renderer import DockerfileRenderer

logger = logging.getLogger(__name__)


def _as_args(args) -> Tuple[str, ...]:
    """
    Treats a lone string as a single argument rather than a sequence of characters.
    """
    if isinstance(args, str):
        return (args,)
    return tuple(args)


class Dockerfile:
    """
    An ordered, append-only sequence of instructions starting with FROM.

    Example::

        dockerfile = (
            Dockerfile(BaseImage(image="nginx", tag="latest"))
            .comment("open port for server")
            .expose(80)
            .copy(".", ".")
            .cmd(["echo", "Hello from container!"])
        )
        with open("Dockerfile", "w") as f:
            f.write(dockerfile.render())
    """

    def __init__(self, base_image: Union[BaseImage, str], renderer: Optional[DockerfileRenderer] = None):
        """
        Initializes the Dockerfile.

        :param base_image: The FROM instruction, or an image reference such as 'nginx:latest'.
        :param renderer: Renderer used by render(); a default one is created if omitted.
        """
        if isinstance(base_image, str):
            base_image = BaseImage.parse(base_image)
        if not isinstance(base_image, BaseImage):
            raise TypeError(f"Expected a BaseImage, got {type(base_image).__name__}")
        self._instructions: List[Instruction] = [base_image]
        self._has_entrypoint = False
        self._has_cmd = False
        self.renderer = renderer or DockerfileRenderer()

    @property
    def base_image(self) -> BaseImage:
        return self._instructions[0]

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return tuple(self._instructions)

    @property
    def has_entrypoint(self) -> bool:
        return self._has_entrypoint

    @property
    def has_cmd(self) -> bool:
        return self._has_cmd

    def append(self, instruction: Instruction) -> "Dockerfile":
        """
        Adds an instruction to the end of the document.

        :param instruction: The instruction to add.
        :return: This Dockerfile, for chaining.
        :raises DuplicateInstructionError: On a second ENTRYPOINT or CMD, or any
            FROM after the first. The document is left unchanged.
        """
        if isinstance(instruction, BaseImage):
            self._reject(instruction)
        if isinstance(instruction, EntryPoint):
            if self._has_entrypoint:
                self._reject(instruction)
            self._has_entrypoint = True
        elif isinstance(instruction, Cmd):
            if self._has_cmd:
                self._reject(instruction)
            self._has_cmd = True

        self._instructions.append(instruction)
        logger.debug("Appended %s instruction", instruction.keyword)
        return self

    def _reject(self, instruction: Instruction):
        logger.warning("Rejected duplicate %s instruction", instruction.keyword)
        raise DuplicateInstructionError(instruction.keyword)

    def extend(self, instructions: Iterable[Instruction]) -> "Dockerfile":
        for instruction in instructions:
            self.append(instruction)
        return self

    def comment(self, text: str) -> "Dockerfile":
        return self.append(Comment(text=text))

    def run(self, *args: str) -> "Dockerfile":
        """
        Appends a RUN instruction. Accepts separate arguments or one list.
        """
        if len(args) == 1 and not isinstance(args[0], str):
            args = tuple(args[0])
        return self.append(Run(args=args))

    def copy(self, src: str, dst: str, from_stage: Optional[str] = None, chown: Optional[str] = None) -> "Dockerfile":
        return self.append(Copy(src=src, dst=dst, from_stage=from_stage, chown=chown))

    def add(self, src: str, dst: str, chown: Optional[str] = None) -> "Dockerfile":
        return self.append(Add(src=src, dst=dst, chown=chown))

    def expose(self, port: int, protocol: Optional[str] = None) -> "Dockerfile":
        return self.append(Expose(port=port, protocol=protocol))

    def env(self, pairs: Union[Mapping[str, str], Iterable, None] = None, **kwargs: str) -> "Dockerfile":
        return self.append(Env.of(pairs, **kwargs))

    def label(self, pairs: Union[Mapping[str, str], Iterable, None] = None, **kwargs: str) -> "Dockerfile":
        return self.append(Label.of(pairs, **kwargs))

    def volume(self, *paths: str) -> "Dockerfile":
        if len(paths) == 1 and not isinstance(paths[0], str):
            paths = tuple(paths[0])
        return self.append(Volume(paths=paths))

    def user(self, user: str, group: Optional[str] = None) -> "Dockerfile":
        return self.append(User(user=user, group=group))

    def workdir(self, path: str) -> "Dockerfile":
        return self.append(WorkDir(path=path))

    def entrypoint(self, args: Iterable[str]) -> "Dockerfile":
        return self.append(EntryPoint(args=_as_args(args)))

    def cmd(self, args: Iterable[str]) -> "Dockerfile":
        return self.append(Cmd(args=_as_args(args)))

    def stop_signal(self, signal: str) -> "Dockerfile":
        return self.append(StopSignal(signal=signal))

    def arg(self, name: str, value: Optional[str] = None) -> "Dockerfile":
        return self.append(Arg(name=name, value=value))

    def shell(self, args: Iterable[str]) -> "Dockerfile":
        return self.append(Shell(args=_as_args(args)))

    def healthcheck(self, cmd: Optional[Iterable[str]] = None, **options) -> "Dockerfile":
        """
        Appends a HEALTHCHECK. Without a command it renders HEALTHCHECK NONE,
        in which case no options may be given.

        :param options: interval, timeout, start_period, retries.
        """
        return self.append(HealthCheck(cmd=_as_args(cmd) if cmd is not None else None, **options))

    def onbuild(self, instruction: Instruction) -> "Dockerfile":
        return self.append(OnBuild(instruction=instruction))

    def maintainer(self, name: str) -> "Dockerfile":
        return self.append(Maintainer(name=name))

    def render(self) -> str:
        """
        Renders the document. Rendering does not modify it.
        """
        return self.renderer.render(self._instructions)

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        return len(self._instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(tuple(self._instructions))

    def __repr__(self) -> str:
        return f"Dockerfile({self.base_image!r}, instructions={len(self)})"
