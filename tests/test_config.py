import os
import unittest
from unittest import mock

from bankstatementparser.config import ParserConfig, load_config


class LoadConfigTest(unittest.TestCase):
  def test_defaults(self):
    with mock.patch.dict(os.environ, {}, clear=True):
      self.assertEqual(load_config(), ParserConfig())

  def test_environment_overrides(self):
    env = {
      "BSP_MAX_CONTINUATION_ROWS": "3",
      "BSP_FALLBACK_CLUSTER_GAP": "20.5",
      "BSP_INFER_DIRECTION": "on",
      "BSP_NORMALIZE_HEADERS": "yes",
      "BSP_LOG_LEVEL": "debug",
      "BSP_HEADER_THRESHOLD": "  ",
    }
    with mock.patch.dict(os.environ, env, clear=True):
      config = load_config()
    self.assertEqual(config.max_continuation_rows, 3)
    self.assertEqual(config.fallback_cluster_gap, 20.5)
    self.assertTrue(config.infer_direction)
    self.assertTrue(config.normalize_headers)
    self.assertEqual(config.log_level, "DEBUG")
    self.assertEqual(config.header_threshold, ParserConfig().header_threshold)

  def test_bad_values(self):
    for key, value in (("BSP_HEADER_SCAN_ROWS", "many"), ("BSP_NOISE_FLOOR", "x"), ("BSP_INFER_DIRECTION", "maybe")):
      with mock.patch.dict(os.environ, {key: value}, clear=True):
        with self.assertRaises(ValueError):
          load_config()

  def test_error_names_the_variable(self):
    with mock.patch.dict(os.environ, {"BSP_BOUNDARY_MIN_GAP": "wide"}, clear=True):
      with self.assertRaisesRegex(ValueError, "BSP_BOUNDARY_MIN_GAP must be a number"):
        load_config()

  def test_validate(self):
    with self.assertRaises(ValueError):
      ParserConfig(min_row_tolerance=10, max_row_tolerance=2).validate()
    with self.assertRaises(ValueError):
      ParserConfig(fallback_min_support=0).validate()
    with self.assertRaises(ValueError):
      ParserConfig(max_continuation_rows=0).validate()


if __name__ == '__main__':
  unittest.main()
