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
dockgen - Dockerfile generator

Builds Dockerfiles as an ordered list of typed instructions and renders
them to text ready for a container build tool.
"""

from .errors import DockgenError, DuplicateInstructionError, RecipeError
from .MODELS.image_reference import ImageReference
from .MODELS.instructions import (
    Add, Arg, BaseImage, Cmd, Comment, Copy, EntryPoint, Env, Expose,
    HealthCheck, Instruction, Label, Maintainer, OnBuild, Run, Shell,
    StopSignal, User, Volume, WorkDir,
)
from .BUILDERS.dockerfile import Dockerfile
from .RENDERERS.dockerfile_renderer import DockerfileRenderer, render_instruction

__version__ = "0.1.0"
__author__ = "Michael Maillet, Damien Davison, Sacha Davison"
__license__ = "Apache-2.0"

__all__ = [
    "Add", "Arg", "BaseImage", "Cmd", "Comment", "Copy", "Dockerfile",
    "DockerfileRenderer", "DockgenError", "DuplicateInstructionError",
    "EntryPoint", "Env", "Expose", "HealthCheck", "ImageReference",
    "Instruction", "Label", "Maintainer", "OnBuild", "RecipeError", "Run",
    "Shell", "StopSignal", "User", "Volume", "WorkDir", "render_instruction",
]
