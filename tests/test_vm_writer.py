import os
import tempfile
import unittest

from JackErrors import InvalidKindError
from VMWriter import Command, Segment, VMWriter


class TestVMWriter(unittest.TestCase):
    def test_command_vocabulary(self):
        vm = VMWriter()
        vm.writeFunction('Main.main', 2)
        vm.writePush(Segment.CONSTANT, 7)
        vm.writePop('local', 1)
        vm.writeArithmetic(Command.NEG)
        vm.writeArithmetic('eq')
        vm.writeLabel('Main$WHILE_EXP0')
        vm.writeIf('Main$WHILE_END0')
        vm.writeGoto('Main$WHILE_EXP0')
        vm.writeCall('Math.multiply', 2)
        vm.writeReturn()
        self.assertEqual(vm.getvalue(), (
            "function Main.main 2\n"
            "push constant 7\n"
            "pop local 1\n"
            "neg\n"
            "eq\n"
            "label Main$WHILE_EXP0\n"
            "if-goto Main$WHILE_END0\n"
            "goto Main$WHILE_EXP0\n"
            "call Math.multiply 2\n"
            "return\n"
        ))

    def test_pop_into_constant_is_rejected(self):
        with self.assertRaises(InvalidKindError):
            VMWriter().writePop(Segment.CONSTANT, 0)

    def test_unknown_segment_or_command(self):
        vm = VMWriter()
        with self.assertRaises(ValueError):
            vm.writePush('field', 0)
        with self.assertRaises(ValueError):
            vm.writeArithmetic('mul')

    def test_file_written_only_on_close(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'Main.vm')
            vm = VMWriter(path)
            vm.writeReturn()
            self.assertFalse(os.path.exists(path))
            vm.close()
            with open(path) as f:
                self.assertEqual(f.read(), "return\n")

    def test_closed_writer_rejects_writes(self):
        vm = VMWriter()
        vm.close()
        with self.assertRaises(ValueError):
            vm.writeReturn()


if __name__ == '__main__':
    unittest.main()
