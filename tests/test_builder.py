import os
import stat
import tempfile
import unittest
from unittest.mock import patch
from aurora.builder import run_build, locate_binary
from aurora.errors import BuildError, ConfigureError, LocateError
from aurora.utils.build_system_resolver import BuildPlan, BuildSystemKind


def _plan(kind, source_dir, flags=(), name="hello"):
    return BuildPlan(kind=kind, extra_flags=tuple(flags), source_dir=source_dir, package_name=name)


@patch('aurora.builder.logger')
@patch('aurora.builder.run_shell_command')
class TestRunBuild(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.src = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def _calls(self, mock_run):
        return [(c.args[0], c.kwargs["cwd"]) for c in mock_run.call_args_list]

    def test_make_uses_discovered_makefile_and_flags(self, mock_run, mock_logger):
        open(os.path.join(self.src, "GNUmakefile"), "w").close()
        mock_run.return_value = ("", "", 0)
        run_build(_plan(BuildSystemKind.MAKE, self.src, ["PREFIX=/usr"]))
        self.assertEqual(self._calls(mock_run), [
            (["make", "-f", "GNUmakefile", "PREFIX=/usr"], self.src),
        ])

    def test_autotools_configure_then_make_without_flags(self, mock_run, mock_logger):
        mock_run.return_value = ("", "", 0)
        run_build(_plan(BuildSystemKind.AUTOTOOLS, self.src, ["--prefix=/usr"]))
        self.assertEqual(self._calls(mock_run), [
            (["./configure", "--prefix=/usr"], self.src),
            (["make"], self.src),
        ])

    def test_autotools_configure_failure_stops_before_make(self, mock_run, mock_logger):
        mock_run.return_value = ("", "", 1)
        with self.assertRaises(ConfigureError) as cm:
            run_build(_plan(BuildSystemKind.AUTOTOOLS, self.src))
        self.assertEqual(cm.exception.stage, "configure")
        self.assertEqual(mock_run.call_count, 1)

    def test_autotools_make_failure_is_tagged_make(self, mock_run, mock_logger):
        mock_run.side_effect = [("", "", 0), ("", "", 2)]
        with self.assertRaises(BuildError) as cm:
            run_build(_plan(BuildSystemKind.AUTOTOOLS, self.src))
        self.assertNotIsInstance(cm.exception, ConfigureError)
        self.assertEqual(cm.exception.stage, "make")
        self.assertEqual(cm.exception.returncode, 2)

    def test_cmake_success_does_not_retry(self, mock_run, mock_logger):
        mock_run.return_value = ("", "", 0)
        run_build(_plan(BuildSystemKind.CMAKE, self.src, ["-DFOO=ON"]))
        build_dir = os.path.join(self.src, "build")
        self.assertTrue(os.path.isdir(build_dir))
        self.assertEqual(self._calls(mock_run), [
            (["cmake", "-DCMAKE_BUILD_TYPE=Release", "-DFOO=ON", ".."], build_dir),
        ])

    def test_cmake_retries_once_without_build_type(self, mock_run, mock_logger):
        mock_run.side_effect = [("", "", 1), ("", "", 0)]
        run_build(_plan(BuildSystemKind.CMAKE, self.src, ["-DFOO=ON"]))
        build_dir = os.path.join(self.src, "build")
        self.assertEqual(self._calls(mock_run), [
            (["cmake", "-DCMAKE_BUILD_TYPE=Release", "-DFOO=ON", ".."], build_dir),
            (["cmake", "-DFOO=ON", ".."], build_dir),
        ])

    def test_cmake_gives_up_after_fallback(self, mock_run, mock_logger):
        mock_run.return_value = ("", "", 1)
        with self.assertRaises(BuildError) as cm:
            run_build(_plan(BuildSystemKind.CMAKE, self.src))
        self.assertEqual(cm.exception.stage, "cmake-setup")
        self.assertEqual(mock_run.call_count, 2)

    def test_cargo_release_build_pinned_to_source_root(self, mock_run, mock_logger):
        mock_run.return_value = ("", "", 0)
        run_build(_plan(BuildSystemKind.CARGO, self.src, ["--offline", "--verbose"]))
        self.assertEqual(self._calls(mock_run), [
            ([
                "cargo", "build", "--release", "--offline", "--verbose",
                "--manifest-path", os.path.join(self.src, "Cargo.toml"),
                "--target-dir", os.path.join(self.src, "target"),
            ], self.src),
        ])

    def test_meson_setup_falls_back_once_then_ninja(self, mock_run, mock_logger):
        mock_run.side_effect = [("", "", 1), ("", "", 0), ("", "", 0)]
        run_build(_plan(BuildSystemKind.MESON, self.src, ["-Dtests=false"]))
        self.assertTrue(os.path.isdir(os.path.join(self.src, "build")))
        self.assertEqual(self._calls(mock_run), [
            (["meson", "setup", "-Dtests=false", "build"], self.src),
            (["meson", "build"], self.src),
            (["ninja", "-C", "build"], self.src),
        ])

    def test_meson_runs_ninja_after_both_setups_fail(self, mock_run, mock_logger):
        mock_run.side_effect = [("", "", 1), ("", "", 1), ("", "", 0)]
        run_build(_plan(BuildSystemKind.MESON, self.src))
        self.assertEqual(self._calls(mock_run), [
            (["meson", "setup", "build"], self.src),
            (["meson", "build"], self.src),
            (["ninja", "-C", "build"], self.src),
        ])

    def test_meson_ninja_is_final_signal_after_failed_setup(self, mock_run, mock_logger):
        mock_run.return_value = ("", "", 1)
        with self.assertRaises(BuildError) as cm:
            run_build(_plan(BuildSystemKind.MESON, self.src))
        self.assertEqual(cm.exception.stage, "ninja")
        self.assertEqual(mock_run.call_count, 3)

    def test_meson_ninja_failure_is_reported(self, mock_run, mock_logger):
        mock_run.side_effect = [("", "", 0), ("", "", 1)]
        with self.assertRaises(BuildError) as cm:
            run_build(_plan(BuildSystemKind.MESON, self.src))
        self.assertEqual(cm.exception.stage, "ninja")

    def test_ninja_nimble_and_stack_recipes(self, mock_run, mock_logger):
        mock_run.return_value = ("", "", 0)
        expected = {
            BuildSystemKind.NINJA: ["ninja", "-j2"],
            BuildSystemKind.NIMBLE: ["nimble", "build", "-j2"],
            BuildSystemKind.STACK: ["stack", "install", "-j2", "--local-bin-path", os.path.join(self.src, "bin")],
        }
        for kind, command in expected.items():
            with self.subTest(kind=kind):
                mock_run.reset_mock()
                run_build(_plan(kind, self.src, ["-j2"]))
                self.assertEqual(self._calls(mock_run), [(command, self.src)])

    def test_missing_tool_is_a_build_failure(self, mock_run, mock_logger):
        mock_run.return_value = ("", "[Errno 2] No such file or directory: 'nimble'", -1)
        with self.assertRaises(BuildError) as cm:
            run_build(_plan(BuildSystemKind.NIMBLE, self.src))
        self.assertEqual(cm.exception.stage, "nimble-build")


@patch('aurora.builder.logger')
class TestLocateBinary(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.src = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def _make_file(self, *parts, content=""):
        path = os.path.join(self.src, *parts)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(content)
        os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR)
        return path

    def test_root_binary_kinds(self, mock_logger):
        path = self._make_file("hello")
        for kind in (BuildSystemKind.MAKE, BuildSystemKind.AUTOTOOLS, BuildSystemKind.NINJA, BuildSystemKind.NIMBLE):
            with self.subTest(kind=kind):
                self.assertEqual(locate_binary(_plan(kind, self.src)), path)

    def test_cmake_looks_in_build_dir(self, mock_logger):
        self._make_file("hello")
        path = self._make_file("build", "hello")
        self.assertEqual(locate_binary(_plan(BuildSystemKind.CMAKE, self.src)), path)

    def test_cmake_ignores_root_binary(self, mock_logger):
        self._make_file("hello")
        with self.assertRaises(LocateError):
            locate_binary(_plan(BuildSystemKind.CMAKE, self.src))

    def test_cargo_prefers_declared_bin_name(self, mock_logger):
        self._make_file("Cargo.toml", content='[package]\nname = "hello-rs"\n\n[[bin]]\nname = "hi"\n')
        self._make_file("target", "release", "hello-rs")
        path = self._make_file("target", "release", "hi")
        self.assertEqual(locate_binary(_plan(BuildSystemKind.CARGO, self.src)), path)

    def test_cargo_falls_back_to_package_name_and_debug(self, mock_logger):
        self._make_file("Cargo.toml", content='[package]\nname = "hello-rs"\n')
        path = self._make_file("target", "debug", "hello-rs")
        self.assertEqual(locate_binary(_plan(BuildSystemKind.CARGO, self.src)), path)

    def test_cargo_release_before_debug(self, mock_logger):
        self._make_file("Cargo.toml", content='[package]\nname = "hello"\n')
        self._make_file("target", "debug", "hello")
        path = self._make_file("target", "release", "hello")
        self.assertEqual(locate_binary(_plan(BuildSystemKind.CARGO, self.src)), path)

    def test_cargo_unreadable_manifest_uses_package_name(self, mock_logger):
        self._make_file("Cargo.toml", content="[package\nname = ")
        path = self._make_file("target", "release", "hello")
        self.assertEqual(locate_binary(_plan(BuildSystemKind.CARGO, self.src)), path)

    def test_meson_searches_build_tree(self, mock_logger):
        self._make_file("build", "hello.p", "main.c.o")
        path = self._make_file("build", "src", "cli", "hello")
        self.assertEqual(locate_binary(_plan(BuildSystemKind.MESON, self.src)), path)

    def test_stack_searches_bin_dir(self, mock_logger):
        path = self._make_file("bin", "hello")
        self.assertEqual(locate_binary(_plan(BuildSystemKind.STACK, self.src)), path)

    def test_stack_without_bin_dir(self, mock_logger):
        self._make_file("hello")
        with self.assertRaises(LocateError):
            locate_binary(_plan(BuildSystemKind.STACK, self.src))

    def test_missing_binary_raises_locate_error(self, mock_logger):
        self._make_file("build", "not-hello")
        for kind in BuildSystemKind:
            with self.subTest(kind=kind):
                with self.assertRaises(LocateError):
                    locate_binary(_plan(kind, self.src))


if __name__ == '__main__':
    unittest.main()
