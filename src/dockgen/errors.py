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
Exceptions raised by dockgen.
"""


class DockgenError(Exception):
    """Base class for dockgen errors."""


class DuplicateInstructionError(DockgenError, ValueError):
    """
    Raised when a singleton instruction (ENTRYPOINT, CMD, FROM) is appended
    to a Dockerfile that already holds one.
    """

    def __init__(self, keyword: str):
        self.keyword = keyword
        super().__init__(f"Dockerfile already contains a {keyword} instruction")


class RecipeError(DockgenError, ValueError):
    pass
