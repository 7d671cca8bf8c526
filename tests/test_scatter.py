"""Tests for the projection scatter renderer."""

import numpy as np
import pytest
from matplotlib import image as mpimg

from pcaviz.errors import InvalidInput
from pcaviz.visualization import axis_bounds, default_label_colors, render_projection


@pytest.fixture
def projection():
    rng = np.random.default_rng(3)
    return rng.normal(size=(20, 2))


class TestAxisBounds:
    def test_padding_on_both_ends(self):
        projected = np.array([[-1.0, 2.0], [3.0, 5.0], [0.0, 4.0]])
        assert axis_bounds(projected, margin=1.0) == ((-2.0, 4.0), (1.0, 6.0))

    def test_zero_margin(self):
        projected = np.array([[0.5, -0.5], [1.5, 0.5]])
        assert axis_bounds(projected, margin=0.0) == ((0.5, 1.5), (-0.5, 0.5))

    def test_single_point(self):
        assert axis_bounds(np.array([[2.0, 3.0]]), margin=1.0) == ((1.0, 3.0), (2.0, 4.0))


class TestDefaultLabelColors:
    def test_binary_labels(self):
        assert default_label_colors([0.0, 1.0, 1.0]) == {0.0: "blue", 1.0: "red"}

    def test_single_binary_label(self):
        assert default_label_colors([1, 1]) == {1.0: "red"}

    def test_multiclass_labels_get_distinct_colors(self):
        colors = default_label_colors([0.0, 1.0, 2.0, 2.0])
        assert sorted(colors) == [0.0, 1.0, 2.0]
        assert len(set(colors.values())) == 3
        assert all(value.startswith("#") for value in colors.values())

    def test_many_labels(self):
        colors = default_label_colors(range(15))
        assert len(colors) == 15
        assert len(set(colors.values())) == 15


class TestRenderProjection:
    def test_writes_image_of_requested_size(self, tmp_path, projection):
        labels = (projection[:, 0] > 0).astype(float)
        path = render_projection(projection, labels, tmp_path / "plot.png")

        assert path == tmp_path / "plot.png"
        assert path.exists()
        assert mpimg.imread(path).shape[:2] == (600, 800)

    def test_custom_size_and_nested_directory(self, tmp_path, projection):
        path = render_projection(
            projection,
            None,
            tmp_path / "nested" / "plot.png",
            size_px=(400, 300),
            title="Custom",
        )
        assert mpimg.imread(path).shape[:2] == (300, 400)

    def test_label_colors_with_string_keys(self, tmp_path, projection):
        labels = np.array([0.0, 1.0, 2.0] * 6 + [0.0, 1.0])
        path = render_projection(
            projection,
            labels,
            tmp_path / "plot.png",
            label_colors={"0": "green", "1.0": "orange"},
        )
        assert path.exists()

    def test_non_numeric_label_color_key(self, tmp_path, projection):
        labels = np.zeros(len(projection))
        with pytest.raises(InvalidInput):
            render_projection(
                projection, labels, tmp_path / "plot.png", label_colors={"zero": "green"}
            )

    @pytest.mark.parametrize(
        "projected",
        [np.empty((0, 2)), np.zeros((4, 3)), np.zeros(4), np.array([[0.0, np.nan]])],
        ids=["empty", "three-columns", "one-dimensional", "nan"],
    )
    def test_rejects_bad_projection(self, tmp_path, projected):
        with pytest.raises(InvalidInput):
            render_projection(projected, None, tmp_path / "plot.png")

    def test_rejects_label_length_mismatch(self, tmp_path, projection):
        with pytest.raises(InvalidInput):
            render_projection(projection, [0.0, 1.0], tmp_path / "plot.png")
