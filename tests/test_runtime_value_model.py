from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for runtime value-model tests")
class RuntimeValueModelTests(unittest.TestCase):
    def test_value_kinds(self) -> None:
        from lisp_jax import run
        from lisp_jax.values import ValueKind, kind_of

        self.assertEqual(kind_of(run("(+ 1 2)")), ValueKind.NUMBER)
        self.assertEqual(kind_of(run("(print 'x')", output=lambda _v: None)), ValueKind.STRING)
        self.assertEqual(kind_of(run("(< 1 2)")), ValueKind.BOOLEAN)
        self.assertEqual(kind_of(True), ValueKind.BOOLEAN)
        self.assertEqual(kind_of(3), ValueKind.NUMBER)

    def test_number_literals_keep_integer_and_float_dtypes(self) -> None:
        import jax.numpy as jnp

        from lisp_jax.values import parse_number_text

        self.assertTrue(jnp.issubdtype(parse_number_text("3").dtype, jnp.integer))
        self.assertTrue(jnp.issubdtype(parse_number_text("3.0").dtype, jnp.floating))
        self.assertTrue(jnp.issubdtype(parse_number_text("1e2").dtype, jnp.floating))
        self.assertEqual(int(parse_number_text("-12")), -12)
        self.assertEqual(parse_number_text("3").dtype, jnp.int64)
        self.assertEqual(parse_number_text("3.5").dtype, jnp.float64)
        self.assertEqual(parse_number_text("16777217").item(), 16777217)
        self.assertEqual(parse_number_text("1e39").item(), 1e39)

    def test_number_literals_outside_double_range_are_rejected(self) -> None:
        from lisp_jax.errors import LispTypeError
        from lisp_jax.values import parse_number_text

        for text in ("1e400", "-1e400", "9223372036854775808", "-9223372036854775809"):
            with self.subTest(text=text):
                with self.assertRaises(LispTypeError) as ctx:
                    parse_number_text(text)
                self.assertEqual(str(ctx.exception), f"Numeric literal out of range: {text}.")

    def test_number_text_validation(self) -> None:
        from lisp_jax.errors import LispTypeError
        from lisp_jax.values import parse_number_text

        for text in ("", "abc", "1.2.3", "--1"):
            with self.subTest(text=text):
                with self.assertRaises(LispTypeError):
                    parse_number_text(text)
        with self.assertRaises(LispTypeError):
            parse_number_text("9" * 40)

    def test_evaluate_validates_its_result(self) -> None:
        from unittest import mock

        from lisp_jax import evaluator, run

        with mock.patch.object(evaluator, "validate_value", wraps=evaluator.validate_value) as spy:
            run("(+ 1 2)")
        spy.assert_called_once()
        self.assertEqual(spy.call_args.kwargs, {"where": "result"})

    def test_unsupported_values_are_rejected(self) -> None:
        import jax.numpy as jnp

        from lisp_jax.errors import LispTypeError
        from lisp_jax.values import validate_value

        validate_value("ok")
        validate_value(jnp.asarray(1.5))
        with self.assertRaises(LispTypeError) as ctx:
            validate_value([1, 2], where="result")
        self.assertTrue(str(ctx.exception).startswith("result: "))
        with self.assertRaises(LispTypeError):
            validate_value(jnp.arange(3))

    def test_to_python_and_format_value(self) -> None:
        import jax.numpy as jnp

        from lisp_jax.values import format_value, to_python

        self.assertEqual(to_python(jnp.asarray(4)), 4)
        self.assertIs(to_python(jnp.asarray(True)), True)
        self.assertEqual(to_python("s"), "s")

        self.assertEqual(format_value(jnp.asarray(4)), "4")
        self.assertEqual(format_value(jnp.asarray(4.0)), "4")
        self.assertEqual(format_value(jnp.asarray(0.1)), "0.1")
        self.assertEqual(format_value(2.25), "2.25")
        self.assertEqual(format_value(True), "true")
        self.assertEqual(format_value(False), "false")
        self.assertEqual(format_value("hello world"), "hello world")
        self.assertEqual(format_value(float("inf")), "Infinity")


if __name__ == "__main__":
    unittest.main()
