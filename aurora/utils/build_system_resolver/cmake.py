import os
from .base_resolver import BaseResolver, BuildStep, BuildSystemKind, _existing_file


class CMakeResolver(BaseResolver):
    kind = BuildSystemKind.CMAKE
    label = "CMake"
    marker_files = ("CMakeLists.txt",)
    output_dirs = ("build",)

    def get_build_steps(self, plan):
        build_dir = os.path.join(plan.source_dir, "build")
        without_build_type = BuildStep("cmake-setup", ("cmake",) + plan.extra_flags + ("..",), build_dir)
        return [
            BuildStep(
                "cmake-setup",
                ("cmake", "-DCMAKE_BUILD_TYPE=Release") + plan.extra_flags + ("..",),
                build_dir,
                fallback=without_build_type,
            ),
        ]

    def find_binary(self, plan):
        return _existing_file(os.path.join(plan.source_dir, "build", plan.package_name))
