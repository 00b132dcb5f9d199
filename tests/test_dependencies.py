"""Tests for repoadvisor.dependencies."""

from __future__ import annotations

from repoadvisor.classifier import estimate_scale
from repoadvisor.dependencies import (
    collect_dependencies,
    detect_frameworks,
    parse_composer_json,
    parse_gemfile,
    parse_go_mod,
    parse_gradle,
    parse_package_json,
    parse_pipfile,
    parse_pom,
    parse_pyproject,
    parse_requirements,
)


def test_collect_dependencies_across_ecosystems(repo_builder) -> None:
    repo_builder.write(
        {
            "package.json": """
            {
              "dependencies": {"express": "^4.18.0", "lodash": "^4.17.0"},
              "devDependencies": {"jest": "^29.0.0"}
            }
            """,
            "api/requirements.txt": """
            # web
            fastapi==0.110.0
            uvicorn[standard]>=0.29
            -r base.txt
            """,
            "pyproject.toml": """
            [project]
            dependencies = ["pydantic>=2", "python>=3.11"]

            [project.optional-dependencies]
            test = ["pytest"]
            """,
        }
    )

    inventory = collect_dependencies(repo_builder.snapshot())

    assert inventory.node == ("express", "lodash")
    assert inventory.dev == ("jest",)
    assert inventory.python == ("fastapi", "pydantic", "pytest", "uvicorn")
    assert inventory.count == 7
    assert inventory.risky == ("lodash",)
    assert detect_frameworks(inventory) == {"Python": ["FastAPI"], "JavaScript": ["Express"]}


def test_parsers_tolerate_malformed_manifests() -> None:
    assert parse_package_json("{not json") == ([], [])
    assert parse_package_json("[]") == ([], [])
    assert parse_pyproject("[project\n") == []
    assert parse_pom("<project>") == set()


def test_parse_requirements_strips_markers_and_extras() -> None:
    content = "requests[security]~=2.31 ; python_version > '3.8'\nflask\n\n# comment\n"

    assert parse_requirements(content) == ["requests", "flask"]


def test_parse_pom_and_gradle() -> None:
    pom = """
    <project xmlns="http://maven.apache.org/POM/4.0.0">
      <dependencies>
        <dependency>
          <groupId>org.springframework.boot</groupId>
          <artifactId>spring-boot-starter-web</artifactId>
        </dependency>
      </dependencies>
    </project>
    """.strip()
    gradle = "dependencies {\n    implementation 'com.google.guava:guava:33.0.0-jre'\n    // api 'x:y'\n}\n"

    assert parse_pom(pom) == {"org.springframework.boot:spring-boot-starter-web"}
    assert parse_gradle(gradle) == (["com.google.guava:guava"], [])


def test_go_module_requirements_count_towards_scale(repo_builder) -> None:
    requires = "\n".join(f"    github.com/acme/lib{index} v1.{index}.0" for index in range(60))
    repo_builder.write(
        {
            "go.mod": f"module example.com/shop\n\ngo 1.22\n\nrequire (\n{requires}\n)\n",
            "main.go": "package main\n\nfunc main() {}\n",
        }
    )

    inventory = collect_dependencies(repo_builder.snapshot())

    assert len(inventory.go) == 60
    assert inventory.count == 60
    assert estimate_scale(3, inventory.count) == "large"


def test_parse_go_mod_handles_single_lines_and_comments() -> None:
    content = (
        "module example.com/api\n"
        "require github.com/gin-gonic/gin v1.9.1\n"
        "require (\n"
        "    golang.org/x/text v0.14.0 // indirect\n"
        ")\n"
    )

    assert parse_go_mod(content) == (["github.com/gin-gonic/gin", "golang.org/x/text"], [])


def test_parse_pipfile_gemfile_and_composer() -> None:
    pipfile = '[packages]\ndjango = "*"\nrequests = ">=2"\n\n[dev-packages]\npytest = "*"\n'
    gemfile = (
        "source 'https://rubygems.org'\n"
        "gem 'rails', '~> 7.1'\n"
        "gem \"pg\"\n"
        "group :development, :test do\n"
        "  gem 'rspec-rails'\n"
        "end\n"
        "gem 'sidekiq'\n"
    )
    composer = '{"require": {"php": ">=8.1", "ext-json": "*", "laravel/framework": "^10"}, "require-dev": {"phpunit/phpunit": "^10"}}'

    assert parse_pipfile(pipfile) == (["django", "requests"], ["pytest"])
    assert parse_gemfile(gemfile) == (["pg", "rails", "sidekiq"], ["rspec-rails"])
    assert parse_composer_json(composer) == (["laravel/framework"], ["phpunit/phpunit"])


def test_every_loaded_manifest_contributes_dependencies(repo_builder) -> None:
    repo_builder.write(
        {
            "Pipfile": '[packages]\nflask = "*"\n',
            "Gemfile": "gem 'sinatra'\n",
            "composer.json": '{"require": {"symfony/framework-bundle": "^6"}}',
            "go.mod": "module x\nrequire github.com/labstack/echo/v4 v4.11.0\n",
        }
    )

    inventory = collect_dependencies(repo_builder.snapshot())

    assert inventory.python == ("flask",)
    assert inventory.ruby == ("sinatra",)
    assert inventory.php == ("symfony/framework-bundle",)
    assert inventory.go == ("github.com/labstack/echo/v4",)
    assert detect_frameworks(inventory) == {
        "Python": ["Flask"],
        "Go": ["Echo"],
        "Ruby": ["Sinatra"],
        "PHP": ["Symfony"],
    }


def test_parse_gradle_matches_configuration_names_only() -> None:
    gradle = (
        "dependencies {\n"
        "    implementation(\"org.jetbrains.kotlinx:kotlinx-coroutines-core:1.8.0\")\n"
        "    testImplementation 'junit:junit:4.13.2'\n"
        "}\n"
        "def rapid = 'com.example:not-a-dependency:1.0'\n"
    )

    assert parse_gradle(gradle) == (
        ["org.jetbrains.kotlinx:kotlinx-coroutines-core"],
        ["junit:junit"],
    )
