import os
from .base_resolver import BaseResolver, BuildStep, BuildSystemKind, find_file_recursive


class MesonResolver(BaseResolver):
    kind = BuildSystemKind.MESON
    label = "Meson"
    marker_files = ("meson.build",)
    output_dirs = ("build",)

    def get_build_steps(self, plan):
        return [
            BuildStep(
                "meson-setup",
                ("meson", "setup") + plan.extra_flags + ("build",),
                plan.source_dir,
                fallback=BuildStep("meson-setup", ("meson", "build"), plan.source_dir),
                fallback_fatal=False,
            ),
            BuildStep("ninja", ("ninja", "-C", "build"), plan.source_dir),
        ]

    def find_binary(self, plan):
        return find_file_recursive(os.path.join(plan.source_dir, "build"), plan.package_name)


class NinjaResolver(BaseResolver):
    kind = BuildSystemKind.NINJA
    label = "Ninja"
    marker_files = ("build.ninja",)

    def get_build_steps(self, plan):
        return [BuildStep("ninja", ("ninja",) + plan.extra_flags, plan.source_dir)]
