import os
from .base_resolver import BaseResolver, BuildStep, BuildSystemKind, find_file_recursive


class StackResolver(BaseResolver):
    kind = BuildSystemKind.STACK
    label = "Stack"
    marker_files = ("stack.yaml",)

    def get_build_steps(self, plan):
        command = ("stack", "install") + plan.extra_flags + (
            "--local-bin-path", os.path.join(plan.source_dir, "bin"),
        )
        return [BuildStep("stack-install", command, plan.source_dir)]

    def find_binary(self, plan):
        bin_dir = os.path.join(plan.source_dir, "bin")
        if not os.path.isdir(bin_dir):
            return None
        return find_file_recursive(bin_dir, plan.package_name)
