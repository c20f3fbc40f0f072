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
Parser for YAML recipes describing a Dockerfile.

A recipe looks like::

    from: nginx:latest
    instructions:
      - comment: open port for server
      - expose: 80
      - copy: {src: ., dst: .}
      - cmd: [echo, Hello from container!]
"""
import logging
import os
import shlex
from typing import Any, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from ..BUILDERS.dockerfile import Dockerfile
from ..errors import RecipeError
from ..MODELS.instructions import (
    Add, Arg, BaseImage, Cmd, Comment, Copy, EntryPoint, Env, Expose,
    HealthCheck, Instruction, Label, Maintainer, OnBuild, Run, Shell,
    StopSignal, User, Volume, WorkDir,
)
from ..UTILS.string_interpolation import EnvironmentInterpolator

logger = logging.getLogger(__name__)


class RecipeParser:
    """
    Parser for Dockerfile recipe files.
    """
    def __init__(self, context: Optional[Mapping[str, str]] = None):
        """
        Initializes the parser with an optional context for interpolation.

        :param context: Variables for ${VAR} interpolation; defaults to os.environ.
        """
        self.context = dict(os.environ) if context is None else dict(context)
        self._handlers = {
            'comment': self._comment,
            'run': self._run,
            'copy': self._copy,
            'add': self._add,
            'expose': self._expose,
            'env': lambda v: Env(pairs=self._required(v)),
            'label': lambda v: Label(pairs=self._required(v)),
            'volume': lambda v: Volume(paths=self._to_list(v)),
            'user': self._user,
            'workdir': lambda v: WorkDir(path=v),
            'entrypoint': lambda v: EntryPoint(args=self._to_args(v)),
            'cmd': lambda v: Cmd(args=self._to_args(v)),
            'stopsignal': lambda v: StopSignal(signal=self._to_str(v)),
            'arg': self._arg,
            'shell': lambda v: Shell(args=self._to_args(v)),
            'healthcheck': self._healthcheck,
            'onbuild': lambda v: OnBuild(instruction=self._instruction(v)),
            'maintainer': lambda v: Maintainer(name=v),
        }

    def parse(self, recipe_path: str) -> Dockerfile:
        """
        Parses a recipe from a path.

        :param recipe_path: Path to the recipe file.
        :return: The Dockerfile described by the recipe.
        """
        with open(recipe_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> Dockerfile:
        """
        Parses a recipe from a string.

        :param content: YAML content of the recipe.
        :return: The Dockerfile described by the recipe.
        :raises RecipeError: If the recipe is malformed.
        """
        content = EnvironmentInterpolator.interpolate(content, self.context)
        try:
            data = yaml.safe_load(content)
        except (yaml.YAMLError, ValueError) as e:
            raise RecipeError(f"Invalid YAML: {e}") from e

        if not isinstance(data, dict) or 'from' not in data:
            raise RecipeError("Recipe must be a mapping with a 'from' key")

        dockerfile = Dockerfile(self._base_image(data['from']))
        entries = data.get('instructions') or []
        if not isinstance(entries, list):
            raise RecipeError("'instructions' must be a list")

        for index, entry in enumerate(entries):
            try:
                dockerfile.append(self._instruction(entry))
            except RecipeError as e:
                raise RecipeError(f"instructions[{index}]: {e}") from e
        logger.debug("Parsed recipe with %d instructions", len(dockerfile))
        return dockerfile

    def _base_image(self, spec: Any) -> BaseImage:
        if spec is None:
            raise RecipeError("'from' must name an image")
        try:
            if isinstance(spec, dict):
                return BaseImage(**spec)
            return BaseImage.parse(str(spec))
        except (ValidationError, ValueError, TypeError) as e:
            raise RecipeError(f"Invalid 'from': {e}") from e

    def _instruction(self, entry: Any) -> Instruction:
        """
        Builds one instruction from a single-key mapping such as {'expose': 80}.
        """
        if not isinstance(entry, dict) or len(entry) != 1:
            raise RecipeError(f"Expected a single-key mapping, got {entry!r}")
        (key, value), = entry.items()
        handler = self._handlers.get(str(key).lower())
        if handler is None:
            raise RecipeError(f"Unknown instruction {key!r}")
        try:
            return handler(value)
        except (ValidationError, ValueError, TypeError) as e:
            if isinstance(e, RecipeError):
                raise
            raise RecipeError(f"Invalid {key}: {e}") from e

    def _comment(self, value: Any) -> Comment:
        return Comment(text=self._to_str(value))

    def _run(self, value: Any) -> Run:
        return Run(args=self._to_list(value))

    def _copy(self, value: Any) -> Copy:
        if isinstance(value, dict):
            return Copy(**value)
        src, dst = self._to_pair(value)
        return Copy(src=src, dst=dst)

    def _add(self, value: Any) -> Add:
        if isinstance(value, dict):
            return Add(**value)
        src, dst = self._to_pair(value)
        return Add(src=src, dst=dst)

    def _expose(self, value: Any) -> Expose:
        if isinstance(value, dict):
            return Expose(**value)
        port, _, protocol = str(value).partition('/')
        return Expose(port=int(port), protocol=protocol or None)

    def _user(self, value: Any) -> User:
        if isinstance(value, dict):
            return User(**value)
        user, _, group = self._to_str(value).partition(':')
        return User(user=user, group=group or None)

    def _arg(self, value: Any) -> Arg:
        if isinstance(value, dict):
            return Arg(**value)
        name, sep, default = self._to_str(value).partition('=')
        return Arg(name=name, value=default if sep else None)

    def _healthcheck(self, value: Any) -> HealthCheck:
        if value is None or (isinstance(value, str) and value.upper() == 'NONE'):
            return HealthCheck()
        if not isinstance(value, dict):
            return HealthCheck(cmd=self._to_args(value))
        options = dict(value)
        if 'cmd' in options:
            options['cmd'] = self._to_args(options['cmd'])
        return HealthCheck(**options)

    def _to_pair(self, value: Any) -> List[str]:
        items = shlex.split(value) if isinstance(value, str) else list(value)
        if len(items) != 2:
            raise RecipeError(f"Expected source and destination, got {value!r}")
        return items

    def _to_args(self, value: Any) -> List[str]:
        """
        Exec-form arguments: a list is used as is, a string is split like a shell would.
        """
        if isinstance(value, str):
            return shlex.split(value)
        return self._to_list(value)

    def _to_list(self, val: Any) -> List[str]:
        """
        Helper to ensure a value is a list of strings.

        :param val: The value to convert.
        :return: A list of strings.
        """
        if isinstance(val, (str, int)):
            return [str(val)]
        if val is None or isinstance(val, dict):
            raise RecipeError(f"Expected a list, got {val!r}")
        return [self._to_str(v) for v in val]

    def _to_str(self, val: Any) -> str:
        """
        Helper to convert a scalar to a string; an empty YAML value is an error.
        """
        return str(self._required(val))

    def _required(self, val: Any) -> Any:
        if val is None:
            raise RecipeError("Missing value")
        return val
