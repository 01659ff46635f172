from __future__ import annotations

import contextlib
import importlib.util
import io
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for end-to-end tests")
class EndToEndTests(unittest.TestCase):
    def _run_with_stdout(self, source: str):
        from lisp_jax import run

        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            out = run(source)
        return out, buf.getvalue().splitlines()

    def test_source_text_through_tokenizer_parser_and_evaluator(self) -> None:
        from lisp_jax import evaluate, parse, tokenize
        from lisp_jax.values import to_python

        source = "(if (>= (* 6 7) 42) (+ 1 2 3) (/ 1 0))"
        self.assertEqual(to_python(evaluate(parse(tokenize(source)))), 6)

    def test_programs_print_in_evaluation_order(self) -> None:
        from lisp_jax.values import to_python

        out, lines = self._run_with_stdout("(print (+ (print 10) (print 2.5) (print (* 3 4))))")
        self.assertEqual(lines, ["10", "2.5", "12", "24.5"])
        self.assertEqual(to_python(out), 24.5)

        out, lines = self._run_with_stdout("(if (= 'a' 'a') (print (< 1 2)) (print 'never'))")
        self.assertIs(out, True)
        self.assertEqual(lines, ["true"])

    def test_multiline_source_with_comments_and_missing_close_paren(self) -> None:
        from lisp_jax.errors import UnexpectedEOFError

        source = """
        ; greet
        (print (if (< 1 2) 'hello world' 'unreachable')
        """
        with self.assertRaises(UnexpectedEOFError):
            self._run_with_stdout(source)

        out, lines = self._run_with_stdout(source.rstrip() + ")")
        self.assertEqual(out, "hello world")
        self.assertEqual(lines, ["hello world"])

    def test_large_values_print_exactly(self) -> None:
        out, lines = self._run_with_stdout("(print (* 100000 100000))")
        self.assertEqual(lines, ["10000000000"])
        self.assertEqual(int(out), 10_000_000_000)

        _, lines = self._run_with_stdout("(print (/ 1 4))")
        self.assertEqual(lines, ["0.25"])

    def test_failed_program_reports_prints_made_before_the_error(self) -> None:
        from lisp_jax.errors import LispZeroDivisionError

        buf = io.StringIO()
        with contextlib.redirect_stdout(buf), self.assertRaises(LispZeroDivisionError):
            from lisp_jax import run

            run("(+ (print 1) (/ 2 0))")
        self.assertEqual(buf.getvalue().splitlines(), ["1"])


if __name__ == "__main__":
    unittest.main()
