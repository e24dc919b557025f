import numpy as np

from click.testing import CliRunner

from ringworld.cli import cli


def test_generate_prints_summary(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, [
        'generate', '--segments', '3', '--radius', '100', '--width', '10',
        '--texture-dir', str(tmp_path),
    ])

    assert result.exit_code == 0, result.output
    assert "Segments: 3 of 3 (complete)" in result.output
    assert "Per segment: 34 verts, 96 indices" in result.output


def test_generate_cancel_after(tmp_path):
    result = CliRunner().invoke(cli, [
        'generate', '--segments', '5', '--radius', '100', '--width', '10',
        '--cancel-after', '2', '--texture-dir', str(tmp_path),
    ])

    assert result.exit_code == 0, result.output
    assert "Segments: 2 of 5 (cancelled)" in result.output


def test_generate_writes_glb(tmp_path):
    out = tmp_path / "ring.glb"
    result = CliRunner().invoke(cli, [
        'generate', '--segments', '2', '--radius', '100', '--width', '10',
        '--texture-dir', str(tmp_path), '--output', str(out),
    ])

    assert result.exit_code == 0, result.output
    assert out.exists()


def test_generate_rejects_bad_radius(tmp_path):
    result = CliRunner().invoke(cli, [
        'generate', '--radius', '0', '--texture-dir', str(tmp_path),
    ])

    assert result.exit_code != 0
    assert "radius_in_meters must be positive" in result.output


def test_walk_reports_upgrades():
    result = CliRunner().invoke(cli, [
        'walk', '--segments', '8', '--radius', '1000', '--width', '50',
        '--steps', '10', '--speed', '800', '--threshold', '100',
        '--start-angle', '10',
    ])

    assert result.exit_code == 0, result.output
    assert "upgraded segment 0" in result.output
    assert "live segments" in result.output


def test_flat_option_uses_flat_terrain(tmp_path, monkeypatch):
    import ringworld.cli
    from ringworld.controller import RingLifecycleController
    from ringworld.terrain import FlatSampler

    built = []

    class RecordingController(RingLifecycleController):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            built.append(self)

    monkeypatch.setattr(ringworld.cli, "RingLifecycleController",
                        RecordingController)
    result = CliRunner().invoke(cli, [
        'generate', '--segments', '2', '--radius', '100', '--width', '10',
        '--flat', '--texture-dir', str(tmp_path),
    ])

    assert result.exit_code == 0, result.output
    assert isinstance(built[0].sampler, FlatSampler)
    for segment in built[0].registry:
        radial = np.linalg.norm(segment.geometry.vertices[:, :2], axis=1)
        assert np.allclose(radial, 100.0)


def test_progress_bar_closed_when_generation_fails(tmp_path, monkeypatch):
    import ringworld.cli
    from ringworld.controller import RingLifecycleController
    from ringworld.errors import RingWorldError
    from ringworld.progress import TqdmProgressReporter

    reporters = []

    class RecordingProgress(TqdmProgressReporter):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            reporters.append(self)

    def failing_generate(self):
        self.progress.report(1, 4)
        raise RingWorldError("sampler exploded")

    monkeypatch.setattr(ringworld.cli, "TqdmProgressReporter", RecordingProgress)
    monkeypatch.setattr(RingLifecycleController, "generate", failing_generate)
    result = CliRunner().invoke(cli, [
        'generate', '--texture-dir', str(tmp_path),
    ])

    assert result.exit_code != 0
    assert "sampler exploded" in result.output
    assert len(reporters) == 1
    assert reporters[0]._bar is None
