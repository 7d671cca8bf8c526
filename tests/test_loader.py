"""Tests for the labeled CSV loader."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pcaviz.errors import InvalidInput
from pcaviz.preprocessing.loader import LabeledDataset, load_labeled_csv


class TestLoadLabeledCsv:
    def test_last_column_is_target_by_default(self, labeled_csv, labeled_frame):
        dataset = load_labeled_csv(labeled_csv)

        assert isinstance(dataset, LabeledDataset)
        assert dataset.n_samples == 30
        assert dataset.n_features == 4
        assert dataset.feature_columns == ["f1", "f2", "f3", "f4"]
        assert dataset.target_column == "target"
        assert_allclose(dataset.features, labeled_frame[["f1", "f2", "f3", "f4"]].to_numpy())
        assert_allclose(dataset.labels, labeled_frame["target"].to_numpy())

    def test_named_target_column(self, write_csv):
        path = write_csv("label,a,b\n1,0.5,2\n0,1.5,3\n")
        dataset = load_labeled_csv(path, target_column="label")

        assert dataset.feature_columns == ["a", "b"]
        assert_allclose(dataset.features, [[0.5, 2.0], [1.5, 3.0]])
        assert_allclose(dataset.labels, [1.0, 0.0])

    def test_without_target(self, write_csv):
        path = write_csv("a,b,c\n1,2,3\n4,5,6\n")
        dataset = load_labeled_csv(path, has_target=False)

        assert dataset.labels is None
        assert dataset.target_column is None
        assert dataset.features.shape == (2, 3)

    def test_custom_delimiter_and_whitespace(self, write_csv):
        path = write_csv("a; b; y\n 1.0; 2.0; 1\n3.0 ;4.0 ;0\n")
        dataset = load_labeled_csv(path, delimiter=";")

        assert_allclose(dataset.features, [[1.0, 2.0], [3.0, 4.0]])
        assert_allclose(dataset.labels, [1.0, 0.0])

    def test_scientific_notation(self, write_csv):
        dataset = load_labeled_csv(write_csv("a,b,y\n1e3,-2.5E-2,1\n0,1,0\n"))
        assert dataset.features[0, 0] == 1000.0
        assert dataset.features[0, 1] == pytest.approx(-0.025)
        assert dataset.features.dtype == np.float64

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_labeled_csv(tmp_path / "absent.csv")


class TestMalformedInput:
    def test_empty_file(self, write_csv):
        with pytest.raises(InvalidInput, match="empty"):
            load_labeled_csv(write_csv(""))

    def test_header_only(self, write_csv):
        with pytest.raises(InvalidInput, match="no data rows"):
            load_labeled_csv(write_csv("a,b,y\n"))

    def test_extra_field_on_later_row(self, write_csv):
        path = write_csv("a,b,y\n1,2,0\n3,4,1\n5,6,7,8\n")
        with pytest.raises(InvalidInput):
            load_labeled_csv(path)

    def test_every_row_wider_than_header(self, write_csv):
        path = write_csv("a,b,y\n1,2,0,9\n3,4,1,9\n5,7,0,9\n")
        with pytest.raises(InvalidInput, match="more fields than the header"):
            load_labeled_csv(path)

    def test_empty_field(self, write_csv):
        path = write_csv("a,b,y\n1,,0\n3,4,1\n")
        with pytest.raises(InvalidInput, match=r"data row 1 \(line 2\), column 'b' is missing"):
            load_labeled_csv(path)

    def test_duplicate_column_names(self, write_csv):
        with pytest.raises(InvalidInput, match="duplicate column names"):
            load_labeled_csv(write_csv("a,a,y\n1,2,0\n3,4,1\n"))

    def test_missing_field(self, write_csv):
        path = write_csv("a,b,y\n1,2,0\n3,4\n")
        with pytest.raises(InvalidInput, match=r"data row 2 \(line 3\), column 'y' is missing"):
            load_labeled_csv(path)

    def test_non_numeric_cell(self, write_csv):
        path = write_csv("a,b,y\n1,2,0\n3,abc,1\n")
        with pytest.raises(InvalidInput, match="column 'b' has non-numeric"):
            load_labeled_csv(path)

    def test_infinite_cell(self, write_csv):
        path = write_csv("a,b,y\n1,inf,0\n3,4,1\n")
        with pytest.raises(InvalidInput, match="data row 1"):
            load_labeled_csv(path)

    def test_non_numeric_label(self, write_csv):
        path = write_csv("a,b,y\n1,2,yes\n3,4,no\n")
        with pytest.raises(InvalidInput, match="column 'y'"):
            load_labeled_csv(path)

    def test_unknown_target_column(self, write_csv):
        with pytest.raises(InvalidInput, match="not found"):
            load_labeled_csv(write_csv("a,b\n1,2\n"), target_column="label")

    def test_target_is_the_only_column(self, write_csv):
        with pytest.raises(InvalidInput, match="no feature columns"):
            load_labeled_csv(write_csv("y\n1\n0\n"))
