from __future__ import annotations

import json
import math

import numpy as np
import pytest
import scipy.sparse
import sympy as sp

from plotpoetry import Geom, Guide, Layer, PlotConfig, Scale, Stat, layer, nonzeros, plot, spy


def test_plot_single_function_draws_one_line() -> None:
    fig = plot(math.sin, 0, math.pi)

    (trace,) = fig.data
    assert trace.mode == "lines"
    assert len(trace.x) == 251
    np.testing.assert_allclose(trace.y, np.sin(trace.x))
    assert fig.layout.xaxis.title.text == "x"
    assert fig.layout.yaxis.title.text == "f(x)"


def test_plot_several_functions_colors_by_label() -> None:
    x = sp.Symbol("x")

    fig = plot([sp.sin(x), math.cos, "exp(-x)"], 0, 1)

    assert [trace.name for trace in fig.data] == ["sin(x)", "f_2", "exp(-x)"]
    assert all(len(trace.x) == 251 for trace in fig.data)
    assert fig.layout.legend.title.text == "f"


def test_plot_mapping_overrides_win() -> None:
    fig = plot([abs, math.sin], -1, 1, color=None)

    assert len(fig.data) == 1
    assert len(fig.data[0].x) == 2 * 251


def test_plot_forwards_extra_elements_and_layers() -> None:
    fig = plot(
        math.exp,
        0,
        1,
        Guide.title("Growth"),
        Scale.y_log10,
        layer(lambda t: 1 + t, 0, 1),
    )

    assert len(fig.data) == 2
    assert fig.layout.title.text == "Growth"
    assert fig.layout.yaxis.type == "log"


def test_plot_accepts_config() -> None:
    fig = plot(abs, -1, 1, config=PlotConfig(samples=4))

    assert list(fig.data[0].x) == [-1.0, -0.5, 0.0, 0.5, 1.0]


def test_layer_uses_nil_stat_and_line_geometry() -> None:
    x = sp.Symbol("x")

    lyr = layer([x, x**2], 0, 1)

    assert isinstance(lyr, Layer)
    assert lyr.stats == (Stat.nil,)
    assert lyr.geoms == (Geom.line,)
    assert lyr.mapping == {"x": "x", "y": "f(x)", "color": "f"}
    assert len(lyr.data) == 2 * 251


def test_layer_mapping_overrides_win() -> None:
    lyr = layer(abs, 0, 1, y="x")

    assert lyr.mapping == {"x": "x", "y": "x"}


def test_nonzeros_of_dense_matrix() -> None:
    table = nonzeros([[0, 1], [2, 0]])

    assert list(table.columns) == ["i", "j", "value"]
    assert sorted(table.itertuples(index=False, name=None)) == [(0, 1, 1), (1, 0, 2)]


def test_nonzeros_of_sparse_matrix_drops_explicit_zeros() -> None:
    M = scipy.sparse.csr_matrix(([5.0, 0.0, -1.0], ([0, 1, 2], [2, 1, 0])), shape=(3, 3))

    table = nonzeros(M)

    assert sorted(table.itertuples(index=False, name=None)) == [(0, 2, 5.0), (2, 0, -1.0)]


def test_nonzeros_rejects_non_matrices() -> None:
    with pytest.raises(ValueError, match="2-D"):
        nonzeros([1, 2, 3])


def test_spy_draws_discrete_flipped_heat_grid() -> None:
    fig = spy([[0, 1], [2, 0]])

    (heatmap,) = fig.data
    assert heatmap.type == "heatmap"
    cells = sorted(zip(np.asarray(heatmap.y).tolist(), np.asarray(heatmap.x).tolist(), np.asarray(heatmap.z).tolist()))
    assert cells == [(0, 1, 1), (1, 0, 2)]
    assert fig.layout.yaxis.autorange == "reversed"
    assert fig.layout.xaxis.type == "category"
    assert fig.layout.yaxis.type == "category"
    assert fig.layout.coloraxis.colorscale is not None


def test_spy_appends_caller_elements_and_mapping() -> None:
    fig = spy(np.eye(3), Guide.title("Identity"), Scale.continuous_color("Greys"), x="i", y="j")

    assert fig.layout.title.text == "Identity"
    assert fig.layout.xaxis.title.text == "i"
    assert len(fig.data[0].z) == 3


def test_plot_expression_strings_and_function_classes_serialize() -> None:
    fig = plot(["x**2", sp.cos], 0, 1)

    assert [trace.name for trace in fig.data] == ["x**2", "cos(x)"]
    np.testing.assert_allclose(fig.data[0].y, np.asarray(fig.data[0].x) ** 2)
    assert json.loads(fig.to_json())["data"][1]["name"] == "cos(x)"
