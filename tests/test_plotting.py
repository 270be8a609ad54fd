import matplotlib.pyplot as plt
import pytest

from photon_noise.errors import PlotError
from photon_noise.grain.scaling_curve import sample_scaling_curve
from photon_noise.sensor.noise_model import NoiseModelConfig, SensorNoiseModel
from photon_noise.transfer.transfer_functions import HLG
from photon_noise.utils.plotting import plot_scaling_curve


def _hlg_config():
    return NoiseModelConfig(1920, 1080, 6400, HLG)


def test_returns_figure_when_not_saved():
    curve = sample_scaling_curve(_hlg_config())
    fig = plot_scaling_curve(curve)
    try:
        (line,) = fig.axes[0].lines
        assert list(line.get_xdata()) == curve.xs
        assert list(line.get_ydata()) == curve.noise_values
    finally:
        plt.close(fig)


def test_saves_png_with_snr_axis(tmp_path):
    config = _hlg_config()
    out = tmp_path / "hlg.png"
    result = plot_scaling_curve(sample_scaling_curve(config), model=SensorNoiseModel(config), path=out)
    assert result is None
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


@pytest.mark.parametrize("name", ["missing/curve.png", "curve.notaformat"])
def test_save_failure_closes_figure(tmp_path, name):
    before = plt.get_fignums()
    with pytest.raises(PlotError, match="Unable to save plot"):
        plot_scaling_curve(sample_scaling_curve(_hlg_config()), path=tmp_path / name)
    assert plt.get_fignums() == before
