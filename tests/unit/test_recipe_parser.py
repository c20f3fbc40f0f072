import pytest

from dockgen import DuplicateInstructionError, RecipeError
from dockgen.MODELS.instructions import (
    Arg, BaseImage, Copy, Env, Expose, HealthCheck, OnBuild, Run, User,
)
from dockgen.PARSERS.recipe_parser import RecipeParser


NGINX_RECIPE = """
from: nginx:latest
instructions:
  - comment: open port for server
  - expose: 80
  - copy: {src: ., dst: .}
  - cmd: [echo, Hello from container!]
"""


def test_parse_from_string():
    dockerfile = RecipeParser(context={}).parse_from_string(NGINX_RECIPE)
    assert dockerfile.render() == (
        "FROM nginx:latest\n"
        "\n"
        "# open port for server\n"
        "EXPOSE 80\n"
        "COPY . .\n"
        "\n"
        'CMD ["echo", "Hello from container!"]\n'
    )


def test_parse_file(tmp_path):
    recipe = tmp_path / "recipe.yml"
    recipe.write_text(NGINX_RECIPE)
    dockerfile = RecipeParser(context={}).parse(str(recipe))
    assert dockerfile.base_image == BaseImage(image="nginx", tag="latest")
    assert len(dockerfile) == 5


def test_base_image_mapping():
    dockerfile = RecipeParser(context={}).parse_from_string(
        "from: {image: rust, tag: '1.75', alias: builder}\n"
    )
    assert dockerfile.render() == "FROM rust:1.75 AS builder\n"


def test_instruction_shapes():
    content = """
from: alpine
instructions:
  - run: apk add --no-cache curl
  - copy: "--from-is-not-parsed dst"
  - copy: {src: /app, dst: /srv, from: builder, chown: app}
  - expose: 53/udp
  - expose: {port: 8080}
  - env: {B: 2, A: 1}
  - env: [X=1, X=2]
  - user: app:staff
  - arg: VERSION=1.0
  - arg: {name: TARGET}
  - onbuild: {run: [make]}
"""
    instructions = RecipeParser(context={}).parse_from_string(content).instructions
    assert instructions[1] == Run(args=["apk add --no-cache curl"])
    assert instructions[2] == Copy(src="--from-is-not-parsed", dst="dst")
    assert instructions[3] == Copy(src="/app", dst="/srv", from_stage="builder", chown="app")
    assert instructions[4] == Expose(port=53, protocol="udp")
    assert instructions[5] == Expose(port=8080)
    assert instructions[6] == Env(pairs=[("B", "2"), ("A", "1")])
    assert instructions[7] == Env(pairs=[("X", "1"), ("X", "2")])
    assert instructions[8] == User(user="app", group="staff")
    assert instructions[9] == Arg(name="VERSION", value="1.0")
    assert instructions[10] == Arg(name="TARGET")
    assert instructions[11] == OnBuild(instruction=Run(args=["make"]))


def test_exec_form_string_is_split():
    dockerfile = RecipeParser(context={}).parse_from_string(
        "from: alpine\ninstructions:\n  - entrypoint: python -m 'my app'\n"
    )
    assert dockerfile.render().splitlines()[-1] == 'ENTRYPOINT ["python", "-m", "my app"]'


def test_healthcheck_shapes():
    content = """
from: alpine
instructions:
  - healthcheck: NONE
  - healthcheck:
      cmd: curl -f http://localhost/
      interval: 30s
      retries: 3
"""
    instructions = RecipeParser(context={}).parse_from_string(content).instructions
    assert instructions[1] == HealthCheck()
    assert instructions[2] == HealthCheck(cmd=["curl", "-f", "http://localhost/"], interval="30s", retries=3)


def test_interpolation_from_context():
    content = "from: python:${PY_VERSION}\ninstructions:\n  - workdir: ${APP_DIR:-/app}\n"
    dockerfile = RecipeParser(context={"PY_VERSION": "3.12"}).parse_from_string(content)
    assert dockerfile.render() == "FROM python:3.12\nWORKDIR /app\n"


def test_escaped_variable_is_kept():
    content = "from: alpine\ninstructions:\n  - run: echo $${HOME}\n"
    dockerfile = RecipeParser(context={}).parse_from_string(content)
    assert dockerfile.render().splitlines()[1] == "RUN echo ${HOME}"


def test_missing_variable():
    with pytest.raises(RecipeError):
        RecipeParser(context={}).parse_from_string("from: python:${PY_VERSION}\n")


def test_defaults_to_environment(monkeypatch):
    monkeypatch.setenv("DOCKGEN_TEST_IMAGE", "busybox")
    dockerfile = RecipeParser().parse_from_string("from: ${DOCKGEN_TEST_IMAGE}\n")
    assert dockerfile.render() == "FROM busybox\n"


@pytest.mark.parametrize("content", [
    "",
    "- just\n- a list\n",
    "instructions: []\n",
    "from: alpine\ninstructions: {run: make}\n",
    "from: alpine\ninstructions:\n  - frobnicate: yes\n",
    "from: alpine\ninstructions:\n  - {run: a, cmd: b}\n",
    "from: alpine\ninstructions:\n  - expose: http\n",
    "from: alpine\ninstructions:\n  - expose: 70000\n",
    "from: alpine\ninstructions:\n  - copy: only-one\n",
    "from: alpine\ninstructions:\n  - volume: {a: b}\n",
    "from: ''\n",
    "from: [unclosed\n",
])
def test_malformed_recipes(content):
    with pytest.raises(RecipeError):
        RecipeParser(context={}).parse_from_string(content)


def test_error_names_the_entry():
    content = "from: alpine\ninstructions:\n  - run: make\n  - frobnicate: yes\n"
    with pytest.raises(RecipeError, match=r"instructions\[1\]"):
        RecipeParser(context={}).parse_from_string(content)


def test_duplicate_cmd_in_recipe():
    content = "from: alpine\ninstructions:\n  - cmd: [a]\n  - cmd: [b]\n"
    with pytest.raises(DuplicateInstructionError):
        RecipeParser(context={}).parse_from_string(content)


@pytest.mark.parametrize("content", [
    "from:\n",
    "from: alpine\ninstructions:\n  - comment:\n",
    "from: alpine\ninstructions:\n  - user:\n",
    "from: alpine\ninstructions:\n  - stopsignal:\n",
    "from: alpine\ninstructions:\n  - arg:\n",
    "from: alpine\ninstructions:\n  - env: {A: null}\n",
    "from: alpine\ninstructions:\n  - env:\n",
    "from: alpine\ninstructions:\n  - label:\n",
    "from: alpine\ninstructions:\n  - run: [echo, null]\n",
    "from: alpine\ninstructions:\n  - run:\n",
    "from: alpine\ninstructions:\n  - volume: [null]\n",
])
def test_empty_values_rejected(content):
    with pytest.raises(RecipeError):
        RecipeParser(context={}).parse_from_string(content)


def test_healthcheck_options_without_command():
    content = "from: alpine\ninstructions:\n  - healthcheck: {interval: 30s}\n"
    with pytest.raises(RecipeError):
        RecipeParser(context={}).parse_from_string(content)
