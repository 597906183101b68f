"""Unit tests for package manifest assembly (shipwright.scaffolder.manifest)."""

from __future__ import annotations

import pytest

from shipwright.options import PackageManager
from shipwright.scaffolder import manifest
from shipwright.scaffolder.manifest import (
    CLIENT_BASE,
    EXPRESS_BASE,
    MERN_ROOT,
    NEST_JEST_CONFIG,
    DependencySet,
    backend_dependencies,
    build_manifest,
    client_dependencies,
    express_scripts,
    mern_root_scripts,
    nest_scripts,
)
from shipwright.versions import FALLBACK_VERSIONS


# ---------------------------------------------------------------------------
# DependencySet
# ---------------------------------------------------------------------------


class TestDependencySet:
    @pytest.mark.unit
    def test_union_keeps_order_and_dedupes(self):
        a = DependencySet(runtime=("express", "zod"), dev=("typescript",))
        b = DependencySet(runtime=("zod", "pg"), dev=("typescript", "@types/pg"))
        merged = a | b
        assert merged.runtime == ("express", "zod", "pg")
        assert merged.dev == ("typescript", "@types/pg")

    @pytest.mark.unit
    def test_names_spans_both_groups(self):
        deps = DependencySet(runtime=("a",), dev=("b", "a"))
        assert deps.names == ["a", "b"]


# ---------------------------------------------------------------------------
# Increments
# ---------------------------------------------------------------------------


class TestBackendDependencies:
    @pytest.mark.unit
    def test_base_set_only(self, minimal_express):
        assert backend_dependencies("express", minimal_express) == EXPRESS_BASE

    @pytest.mark.unit
    def test_prisma_increment(self, make_options):
        deps = backend_dependencies("express", make_options(database="sqlite"))
        assert "@prisma/client" in deps.runtime
        assert "prisma" in deps.dev

    @pytest.mark.unit
    def test_nest_mongoose_increment(self, make_options):
        deps = backend_dependencies("nest", make_options("nestjs-api", database="mongodb"))
        assert {"@nestjs/mongoose", "mongoose"} <= set(deps.runtime)

    @pytest.mark.unit
    def test_auth_and_docs_increments(self, full_express):
        deps = backend_dependencies("express", full_express)
        assert {"jsonwebtoken", "bcryptjs", "swagger-ui-express", "swagger-jsdoc"} <= set(deps.runtime)
        assert "@types/jsonwebtoken" in deps.dev
        # postgresql with the ORM answer defaulting to yes means Prisma, not pg
        assert "@prisma/client" in deps.runtime
        assert "pg" not in deps.runtime

    @pytest.mark.unit
    def test_nest_docs(self, make_options):
        deps = backend_dependencies("nest", make_options("nestjs-api", include_api_docs=True))
        assert "@nestjs/swagger" in deps.runtime

    @pytest.mark.unit
    def test_no_auth_packages_without_auth(self, make_options):
        deps = backend_dependencies("express", make_options(database="postgresql"))
        assert "jsonwebtoken" not in deps.names


class TestClientDependencies:
    @pytest.mark.unit
    def test_tailwind(self, make_options):
        deps = client_dependencies(make_options("react-vite", "web"))
        assert {"tailwindcss", "@tailwindcss/vite"} <= set(deps.dev)

    @pytest.mark.unit
    def test_styled_components(self, make_options):
        deps = client_dependencies(make_options("react-vite", "web", styling="styled-components"))
        assert "styled-components" in deps.runtime

    @pytest.mark.unit
    def test_css_modules_adds_nothing(self, make_options):
        assert client_dependencies(make_options("react-vite", "web", styling="css-modules")) == CLIENT_BASE


class TestEveryPackageIsBundled:
    @pytest.mark.unit
    def test_all_declared_packages_have_a_fallback(self):
        declared = set(EXPRESS_BASE.names) | set(CLIENT_BASE.names) | set(MERN_ROOT.names)
        for table in (manifest.DATABASE_INCREMENTS["express"], manifest.DATABASE_INCREMENTS["nest"]):
            for deps in table.values():
                declared |= set(deps.names)
        for table in (manifest.AUTH_INCREMENTS, manifest.DOCS_INCREMENTS):
            for deps in table.values():
                declared |= set(deps.names)
        for deps in manifest.STYLING_INCREMENTS.values():
            declared |= set(deps.names)
        declared |= set(manifest.NEST_BASE.names)

        missing = sorted(declared - set(FALLBACK_VERSIONS))
        assert missing == []


# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------


class TestScripts:
    @pytest.mark.unit
    def test_express_scripts(self):
        scripts = express_scripts(PackageManager.NPM)
        assert scripts["dev"] == "tsx watch src/index.ts"
        assert scripts["build"] == "tsc -p tsconfig.build.json"
        assert scripts["start"] == "node dist/index.js"
        assert scripts["check"] == "npm run lint && npm run test"

    @pytest.mark.unit
    def test_composite_script_uses_package_manager(self):
        assert nest_scripts(PackageManager.PNPM)["check"] == "pnpm lint && pnpm test"

    @pytest.mark.unit
    def test_mern_root_scripts(self):
        scripts = mern_root_scripts(PackageManager.YARN)
        assert scripts["dev"] == (
            'concurrently -n server,client -c blue,green '
            '"yarn --cwd server dev" "yarn --cwd client dev"'
        )
        assert scripts["start"] == "yarn --cwd server start"


# ---------------------------------------------------------------------------
# build_manifest
# ---------------------------------------------------------------------------


class TestBuildManifest:
    @pytest.mark.unit
    def test_layout(self):
        deps = DependencySet(runtime=("zod", "express"), dev=("typescript",))
        versions = {"express": "^4.21.2", "zod": "^3.24.1", "typescript": "^5.7.3"}
        manifest = build_manifest("my-api", "My Api REST API", deps, {"dev": "x"}, versions, main="dist/index.js")
        assert list(manifest) == [
            "name", "version", "private", "description", "license", "main",
            "scripts", "dependencies", "devDependencies", "engines",
        ]
        assert list(manifest["dependencies"]) == ["express", "zod"]
        assert manifest["devDependencies"] == {"typescript": "^5.7.3"}
        assert manifest["private"] is True

    @pytest.mark.unit
    def test_empty_groups_omitted(self):
        manifest = build_manifest("root", "Root", MERN_ROOT, {}, {"concurrently": "^9.1.2"})
        assert "dependencies" not in manifest
        assert manifest["devDependencies"] == {"concurrently": "^9.1.2"}

    @pytest.mark.unit
    def test_jest_block_goes_last(self):
        manifest = build_manifest("api", "Api", DependencySet(), {}, {}, jest=NEST_JEST_CONFIG)
        assert list(manifest)[-1] == "jest"
        assert manifest["jest"]["rootDir"] == "src"

    @pytest.mark.unit
    def test_missing_version_raises(self):
        with pytest.raises(KeyError):
            build_manifest("api", "Api", DependencySet(runtime=("express",)), {}, {})
