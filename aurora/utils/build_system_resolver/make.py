from .base_resolver import BaseResolver, BuildStep, BuildSystemKind

MAKEFILE_NAMES = ("Makefile", "makefile", "GNUmakefile")


class MakeResolver(BaseResolver):
    kind = BuildSystemKind.MAKE
    label = "Make"
    marker_files = MAKEFILE_NAMES

    def get_build_steps(self, plan):
        makefile = self.find_marker(plan.source_dir) or "Makefile"
        return [
            BuildStep("make", ("make", "-f", makefile) + plan.extra_flags, plan.source_dir),
        ]


class AutotoolsResolver(BaseResolver):
    kind = BuildSystemKind.AUTOTOOLS
    label = "Autotools"
    marker_files = ("configure",)

    def get_build_steps(self, plan):
        # Extra flags belong to configure only.
        return [
            BuildStep("configure", ("./configure",) + plan.extra_flags, plan.source_dir),
            BuildStep("make", ("make",), plan.source_dir),
        ]
