#!/usr/bin/env python3
"""
Unit tests for the command line fleet planner
"""

import io
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

# Add project root and tests directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import cli_fleet_planner
from cli_fleet_planner import build_parser, get_timestamped_filename, main


class TestCLIFleetPlanner(unittest.TestCase):
    """Test the fleet-planner entry point"""

    FAST_ARGS = ['--population-size', '12', '--generations', '4', '--seed', '1', '--workers', '1']

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        # Keep the global logging configuration untouched
        patcher = patch.object(cli_fleet_planner, 'setup_logging')
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self.temp_dir.cleanup()

    def _run(self, argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        self.assertEqual(args.ward, 123)
        self.assertTrue(args.data.endswith(os.path.join('data', 'sample_fleet.json')))
        self.assertIsNone(args.plot)
        self.assertEqual(build_parser().parse_args(['--plot']).plot, 'output')

    def test_json_output(self):
        code, out, _ = self._run(self.FAST_ARGS + ['--json'])

        self.assertEqual(code, 0)
        exported = json.loads(out)
        result = exported['result']
        self.assertEqual(set(result), {'optimalSolution', 'fuelCost', 'numTrucks'})
        self.assertEqual(set(result['optimalSolution']), {'amin-bazar', 'matuail', 'aminbazar-north'})
        self.assertEqual(exported['solver_info']['generations'], 4)

    def test_text_output(self):
        code, out, _ = self._run(self.FAST_ARGS)
        self.assertEqual(code, 0)
        self.assertIn("Fuel Cost:", out)
        self.assertIn("amin-bazar", out)
        summary = out.strip().splitlines()[-1]
        self.assertTrue(summary.startswith("🚛 "))
        self.assertIn(" trucks • ", summary)

    def test_profile_and_ranking(self):
        code, out, _ = self._run(['--profile', 'fast', '--generations', '2', '--seed', '4',
                                  '--ranking', 'pareto', '--selection', 'rank', '--json'])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)['solver_info']['generations'], 2)

    def test_invalid_override(self):
        code, _, err = self._run(['--population-size', '0'])
        self.assertEqual(code, 1)
        self.assertIn("Configuration error", err)

    def test_missing_config_file(self):
        code, _, _ = self._run(['--config', os.path.join(self.temp_dir.name, 'missing.yaml')])
        self.assertEqual(code, 1)

    def test_config_file(self):
        path = os.path.join(self.temp_dir.name, 'ga.yaml')
        with open(path, 'w') as f:
            f.write("ga:\n  population_size: 10\n  max_generations: 3\n  random_seed: 2\n  max_workers: 1\n")

        code, out, _ = self._run(['--config', path, '--json'])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)['solver_info']['generations'], 3)

    def test_unknown_ward(self):
        code, _, err = self._run(self.FAST_ARGS + ['--ward', '999'])
        self.assertEqual(code, 2)
        self.assertIn("999", err)

    def test_missing_data_file(self):
        code, _, _ = self._run(self.FAST_ARGS + ['--data', os.path.join(self.temp_dir.name, 'none.json')])
        self.assertEqual(code, 2)

    def test_plots_saved(self):
        plot_dir = os.path.join(self.temp_dir.name, 'plots')
        code, out, _ = self._run(self.FAST_ARGS + ['--plot', plot_dir])

        self.assertEqual(code, 0)
        files = os.listdir(plot_dir)
        self.assertEqual(len(files), 2)
        self.assertTrue(any('_convergence' in name for name in files))
        self.assertTrue(any('_allocation' in name for name in files))
        self.assertIn("Plots saved", out)

    def test_timestamped_filename(self):
        name = get_timestamped_filename("fleet", 123)
        self.assertTrue(name.startswith("fleet_ward123_"))


if __name__ == '__main__':
    unittest.main()
