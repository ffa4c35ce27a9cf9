"""CLI tests: render and search commands with the HTTP client patched out."""

from __future__ import annotations

import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SolrQuery.cli import cli

CONFIG_YAML = """\
log:
  level: WARNING
solr:
  base_url: http://localhost:8983/solr
  collection: books
  rows: 7
queries:
  - name: pair
    query:
      AND:
        - TERM: {text: solr, field: name, boost: 3}
        - TERM: {text: apache}
  - name: negated
    query:
      NOT:
        - TERM: {text: solr, field: title}
"""


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self._tmp.name) / "config.yml"
        self.config_path.write_text(CONFIG_YAML, encoding="utf-8")
        self.runner = CliRunner()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _invoke(self, *args: str):
        return self.runner.invoke(cli, ["--config", str(self.config_path), *args])

    def test_render_prints_params_per_query(self) -> None:
        result = self._invoke("render")
        self.assertEqual(result.exit_code, 0, result.output)
        lines = [json.loads(line) for line in result.output.splitlines() if line.strip()]
        self.assertEqual([line["name"] for line in lines], ["pair", "negated"])
        self.assertEqual(
            lines[0]["params"],
            {
                "q": "(_query_:\"{!lucene df='name' v=$q0}\"^3 AND _query_:\"{!lucene v=$q1}\")",
                "q0": "solr",
                "q1": "apache",
            },
        )

    def test_render_single_query_as_url(self) -> None:
        result = self._invoke("render", "--name", "negated", "--url")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(
            result.output.strip(),
            "http://localhost:8983/solr/books/select?"
            "q=%28NOT%20_query_%3A%22%7B%21lucene%20df%3D%27title%27%20v%3D%24q0%7D%22%29&q0=solr",
        )

    def test_render_unknown_name_aborts(self) -> None:
        result = self._invoke("render", "--name", "missing")
        self.assertNotEqual(result.exit_code, 0)

    def test_invalid_config_is_reported(self) -> None:
        self.config_path.write_text("solr: {}\n", encoding="utf-8")
        result = self._invoke("render")
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("solr.base_url", result.output)

    @patch("SolrQuery.cli.runner.SolrClient")
    def test_search_runs_each_query(self, client_cls: MagicMock) -> None:
        client = client_cls.from_config.return_value.__enter__.return_value
        client.select.return_value = {"response": {"numFound": 2, "docs": []}}

        result = self._invoke("search", "--name", "pair")

        self.assertEqual(result.exit_code, 0, result.output)
        client.select.assert_called_once()
        self.assertEqual(client.select.call_args.kwargs["rows"], 7)
        payload = json.loads(result.output.strip())
        self.assertEqual(payload, {"name": "pair", "response": {"response": {"numFound": 2, "docs": []}}})

    @patch("SolrQuery.cli.runner.SolrClient")
    def test_search_failure_aborts(self, client_cls: MagicMock) -> None:
        client = client_cls.from_config.return_value.__enter__.return_value
        client.select.side_effect = RuntimeError("boom")
        result = self._invoke("search", "--rows", "3")
        self.assertNotEqual(result.exit_code, 0)


if __name__ == "__main__":
    unittest.main()
