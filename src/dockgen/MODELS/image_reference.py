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
Image reference splitting for FROM instructions.
Splits references like 'nginx:latest', 'localhost:5000/app@sha256:...' or
'rust:1.75 AS builder' into their parts without applying any defaults.
"""

import re
from typing import Optional
from dataclasses import dataclass

_ALIAS_PATTERN = re.compile(r'^(?P<ref>\S+)\s+AS\s+(?P<alias>\S+)$', re.IGNORECASE)


@dataclass
class ImageReference:
    """
    Parsed image reference as written in a FROM line.

    Examples:
        - nginx -> name='nginx'
        - nginx:1.21 -> name='nginx', tag='1.21'
        - localhost:5000/app -> name='localhost:5000/app'
        - gcr.io/project/image@sha256:abc123 -> name='gcr.io/project/image', digest='sha256:abc123'
        - rust:1.75 AS builder -> name='rust', tag='1.75', alias='builder'
    """

    name: str
    tag: Optional[str] = None
    digest: Optional[str] = None
    alias: Optional[str] = None

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse an image reference string.

        Args:
            reference: Image reference, optionally followed by 'AS <alias>'.

        Returns:
            Parsed ImageReference object.
        """
        reference = reference.strip() if reference else ""
        if not reference:
            raise ValueError("Empty image reference")

        alias = None
        match = _ALIAS_PATTERN.match(reference)
        if match:
            reference = match.group('ref')
            alias = match.group('alias')
        elif any(c.isspace() for c in reference):
            raise ValueError(f"Invalid image reference: {reference!r}")

        digest = None
        if "@" in reference:
            reference, digest = reference.rsplit("@", 1)

        tag = None
        if ":" in reference:
            last_colon = reference.rfind(":")
            after_colon = reference[last_colon + 1:]
            # A colon followed by a path segment is a registry port, not a tag
            if "/" not in after_colon:
                tag = after_colon
                reference = reference[:last_colon]

        if not reference:
            raise ValueError("Image reference has no name")

        return cls(name=reference, tag=tag or None, digest=digest or None, alias=alias)

    def __str__(self) -> str:
        ref = self.name
        if self.tag:
            ref = f"{ref}:{self.tag}"
        if self.digest:
            ref = f"{ref}@{self.digest}"
        if self.alias:
            ref = f"{ref} AS {self.alias}"
        return ref
