import io
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import JackAnalyzer
import Main
from JackTokenizer import JackTokenizer

GOOD = """
// Prints 7.
class Main {
    function void main() {
        do Output.printInt(3 + 4);
        return;
    }
}
"""

BROKEN = "class Broken { function void main() { let = 1; return; } }"


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmp = Path(tempfile.mkdtemp())
        self.out = io.StringIO()
        self.err = io.StringIO()

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def run_main(self, *args, entry=Main.main):
        with redirect_stdout(self.out), redirect_stderr(self.err):
            entry(list(args))

    def test_single_file(self):
        src = self.tmp / "Main.jack"
        src.write_text(GOOD)
        self.run_main(str(src))
        self.assertEqual((self.tmp / "Main.vm").read_text(), (
            "function Main.main 0\n"
            "push constant 3\n"
            "push constant 4\n"
            "add\n"
            "call Output.printInt 1\n"
            "pop temp 0\n"
            "push constant 0\n"
            "return\n"
        ))
        self.assertIn("Main.vm", self.out.getvalue())

    def test_directory_keeps_going_after_a_failure(self):
        (self.tmp / "Broken.jack").write_text(BROKEN)
        (self.tmp / "Main.jack").write_text(GOOD)
        (self.tmp / "notes.txt").write_text("not jack")
        with self.assertRaises(SystemExit) as cm:
            self.run_main(str(self.tmp))
        self.assertEqual(cm.exception.code, 1)
        self.assertFalse((self.tmp / "Broken.vm").exists())
        self.assertTrue((self.tmp / "Main.vm").exists())
        self.assertFalse((self.tmp / "notes.vm").exists())
        self.assertIn("Broken.jack", self.err.getvalue())

    def test_undecodable_file_does_not_stop_the_batch(self):
        (self.tmp / "A.jack").write_bytes(
            b'class A { function void f() { do Output.printString("\xff"); return; } }')
        (self.tmp / "Main.jack").write_text(GOOD)
        with self.assertRaises(SystemExit) as cm:
            self.run_main(str(self.tmp))
        self.assertEqual(cm.exception.code, 1)
        self.assertFalse((self.tmp / "A.vm").exists())
        self.assertTrue((self.tmp / "Main.vm").exists())
        self.assertIn("A.jack", self.err.getvalue())

    def test_usage_errors(self):
        empty = self.tmp / "empty"
        empty.mkdir()
        wrong = self.tmp / "Main.txt"
        wrong.write_text(GOOD)
        for args in ([], [str(self.tmp / "missing.jack")], [str(wrong)], [str(empty)],
                     [str(wrong), str(wrong)]):
            with self.subTest(args=args):
                with self.assertRaises(SystemExit) as cm:
                    self.run_main(*args)
                self.assertEqual(cm.exception.code, 1)


class TestJackAnalyzer(unittest.TestCase):
    def test_tokens_to_xml(self):
        xml = JackAnalyzer.tokens_to_xml(JackTokenizer('if (x < 1) { let s = "a&b"; }'))
        self.assertEqual(xml.splitlines(), [
            "<tokens>",
            "<keyword> if </keyword>",
            "<symbol> ( </symbol>",
            "<identifier> x </identifier>",
            "<symbol> &lt; </symbol>",
            "<integerConstant> 1 </integerConstant>",
            "<symbol> ) </symbol>",
            "<symbol> { </symbol>",
            "<keyword> let </keyword>",
            "<identifier> s </identifier>",
            "<symbol> = </symbol>",
            "<stringConstant> a&amp;b </stringConstant>",
            "<symbol> ; </symbol>",
            "<symbol> } </symbol>",
            "</tokens>",
        ])

    def test_writes_token_file(self):
        tmp = tempfile.mkdtemp()
        try:
            src = os.path.join(tmp, "Main.jack")
            with open(src, "w") as f:
                f.write(GOOD)
            with redirect_stdout(io.StringIO()):
                JackAnalyzer.main([src])
            with open(os.path.join(tmp, "MainT.xml")) as f:
                self.assertTrue(f.read().startswith("<tokens>\n<keyword> class </keyword>\n"))
        finally:
            shutil.rmtree(tmp)


if __name__ == '__main__':
    unittest.main()
