from __future__ import annotations

import io
import json
import logging
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

from interface.cli import build_parser, main, run

LEDGER = {
    "transactions": [
        {"id": "t1", "amount": "100", "type": "income", "transaction_date": "2024-01-05"},
        {"id": "t2", "amount": "40", "type": "expense", "category_id": "C1", "transaction_date": "2024-01-10"},
    ],
    "categories": [{"id": "C1", "name": "Food"}],
    "budgets": [],
}


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "ledger.json"
        self.path.write_text(json.dumps(LEDGER), encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> tuple[int, str, str]:
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_json_output(self) -> None:
        code, out, _ = self._run("dashboard", "--snapshot", str(self.path), "--today", "2024-01-31")

        self.assertEqual(code, 0)
        body = json.loads(out)
        totals = next(v for v in body["views"] if v["tool"] == "ledger.totals")
        self.assertEqual(totals["result"]["balance"], 60.0)

    def test_text_output(self) -> None:
        code, out, _ = self._run("analytics", "--snapshot", str(self.path), "--today", "2024-01-31", "--text")

        self.assertEqual(code, 0)
        self.assertIn("Net worth: $60.00", out)
        self.assertIn("Jan 2024", out)
        self.assertIn("Food: $40.00 (100%)", out)

    def test_missing_snapshot_reports_error(self) -> None:
        code, _, err = self._run("budgets", "--snapshot", str(self.path.with_name("missing.json")))

        self.assertEqual(code, 1)
        self.assertIn("error", err)

    def test_parser_rejects_unknown_page_and_bad_date(self) -> None:
        parser = build_parser()
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                parser.parse_args(["settings"])
            with self.assertRaises(SystemExit):
                parser.parse_args(["dashboard", "--today", "31/01/2024"])

    @patch("interface.cli.main", return_value=0)
    @patch("interface.cli.logging.basicConfig")
    @patch("interface.cli.load_dotenv")
    def test_run_defaults_to_info_logging(self, _load_dotenv, mock_basic_config, _main) -> None:
        with patch.dict(os.environ, {}):
            os.environ.pop("LOG_LEVEL", None)
            with self.assertRaises(SystemExit) as ctx:
                run()

        self.assertEqual(ctx.exception.code, 0)
        self.assertEqual(mock_basic_config.call_args.kwargs["level"], logging.INFO)


if __name__ == "__main__":
    unittest.main()
