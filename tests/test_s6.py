import os

from apklayer.s6.supervision import InitContext


def test_write_supervision_tree(tmp_path):
    ctx = InitContext(tmp_path)
    sv = ctx.write_supervision_tree({"nginx": "/usr/sbin/nginx -g \"daemon off;\"", "cron": "crond -f"})
    assert sv == tmp_path / "sv"
    assert sorted(p.name for p in sv.iterdir()) == ["cron", "nginx"]
    run = sv / "nginx" / "run"
    assert run.read_text().startswith("#!/bin/execlineb -P\n")
    assert os.access(run, os.X_OK)
