"""CLI tests for engine-audit."""

import pytest

from engineaudit import cli


def _run_cli(args):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(args)
    return excinfo.value.code


def test_compatible_project_exits_zero(make_project, capsys):
    project = make_project(engines={"node": ">=14"}, files={"lib/index.js": "var v = a?.b;"})
    assert _run_cli(["-C", str(project)]) == 0
    out = capsys.readouterr().out
    assert "✔ No incompatibilities found" in out


def test_project_without_sources_exits_zero(make_project, capsys):
    project = make_project(engines={"node": ">=10"})
    assert _run_cli(["-C", str(project)]) == 0
    assert "No incompatibilities found" in capsys.readouterr().out


def test_incompatible_project_reports_feature_and_fix(make_project, capsys):
    project = make_project(engines={"node": ">=12"}, files={"lib/index.js": "var v = a?.b;"})
    assert _run_cli(["-C", str(project)]) == 1
    out = capsys.readouterr().out
    assert (
        "✖ ./lib/index.js:1 uses optional chaining which is not supported "
        "on all versions in the range >=12"
    ) in out
    assert "  Remove the use of optional chaining or change the engine field to >=14.0.0" in out
    assert "No incompatibilities found" not in out


def test_repeated_feature_is_collapsed(make_project, capsys):
    project = make_project(
        engines={"node": ">=12"},
        files={"lib/index.js": "var v = a?.b;\nvar w = c?.d;\n"},
    )
    assert _run_cli(["-C", str(project)]) == 1
    out = capsys.readouterr().out
    assert out.count("uses optional chaining") == 1
    assert "(2 occurrences)" in out


def test_include_and_exclude(make_project, capsys):
    project = make_project(
        engines={"node": ">=12"},
        files={"src/index.js": "var v = a?.b;", "dist/index.js": "var v = a;", "dist/legacy.js": "var v = a?.b;"},
    )
    assert _run_cli(["dist/**/*.js", "-e", "dist/legacy.js", "-C", str(project)]) == 0
    assert "No incompatibilities found" in capsys.readouterr().out


def test_verbose_lists_files_before_results(make_project, capsys):
    project = make_project(engines={"node": ">=14"}, files={"a.js": "", "lib/b.js": ""})
    assert _run_cli(["-v", "-C", str(project)]) == 0
    out = capsys.readouterr().out
    assert "Checking 2 file(s):" in out
    assert out.index("./a.js") < out.index("./lib/b.js") < out.index("No incompatibilities found")


def test_unparseable_file_fails_the_run(make_project, capsys):
    project = make_project(
        engines={"node": ">=14"},
        files={"good.js": "var v = a?.b;", "bad.js": "function ("},
    )
    assert _run_cli(["-C", str(project)]) == 1
    out = capsys.readouterr().out
    assert "⚠ Could not analyze bad.js" in out
    assert "✖ Audit incomplete: 1 file(s) could not be analyzed" in out


def test_missing_engines_is_a_configuration_error(make_project, capsys):
    project = make_project(manifest={"name": "demo"}, files={"a.js": "var v = a?.b;"})
    assert _run_cli(["-v", "-C", str(project)]) == 2
    out = capsys.readouterr().out
    assert "✖ No engines field in package.json" in out
    assert "Checking" not in out


def test_missing_node_engine_is_a_configuration_error(make_project, capsys):
    project = make_project(engines={"npm": ">=6"})
    assert _run_cli(["-C", str(project)]) == 2
    assert "✖ No node property of engines field" in capsys.readouterr().out


@pytest.mark.parametrize("engines", [{}, {"node": ""}])
def test_empty_node_engine_is_a_configuration_error(make_project, capsys, engines):
    project = make_project(engines=engines, files={"a.js": "var v = a?.b;"})
    assert _run_cli(["-C", str(project)]) == 2
    assert "✖ No node property of engines field" in capsys.readouterr().out


def test_prerelease_floor_is_audited(make_project, capsys):
    project = make_project(engines={"node": ">=14.0.0-0"}, files={"a.js": "var v = a?.b;"})
    assert _run_cli(["-C", str(project)]) == 1
    out = capsys.readouterr().out
    assert "uses optional chaining" in out
    assert "not a valid semver range" not in out


def test_invalid_range_is_a_configuration_error(make_project, capsys):
    project = make_project(engines={"node": "ten or newer"})
    assert _run_cli(["-C", str(project)]) == 2
    assert "'ten or newer' is not a valid semver range" in capsys.readouterr().out


def test_missing_manifest_is_a_configuration_error(tmp_path, capsys):
    assert _run_cli(["-C", str(tmp_path)]) == 2
    assert "No package.json found" in capsys.readouterr().out


def test_version_flag(capsys):
    assert _run_cli(["--version"]) == 0
    assert "engine-audit" in capsys.readouterr().out


def test_main_runs_the_audit_pipeline(make_project, monkeypatch, capsys):
    project = make_project(engines={"node": ">=14"}, files={"a.js": "", "lib/b.js": ""})
    seen = []
    real_audit = cli.audit

    def recording_audit(project_dir, **kwargs):
        seen.append(kwargs)
        return real_audit(project_dir, **kwargs)

    monkeypatch.setattr(cli, "audit", recording_audit)
    assert _run_cli(["-C", str(project)]) == 0
    assert [str(p) for p in seen[0]["paths"]] == ["a.js", "lib/b.js"]
    assert seen[0]["declared_range"] == ">=14"
