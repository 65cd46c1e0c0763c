import glob
import os
from .base_resolver import BaseResolver, BuildStep, BuildSystemKind


class NimbleResolver(BaseResolver):
    kind = BuildSystemKind.NIMBLE
    label = "Nimble"

    def find_marker(self, source_dir):
        # Any <name>.nimble at the root; sorted so the displayed file is stable.
        matches = sorted(glob.glob(os.path.join(glob.escape(source_dir), "*.nimble")))
        for path in matches:
            if os.path.isfile(path):
                return os.path.basename(path)
        return None

    def get_build_steps(self, plan):
        return [BuildStep("nimble-build", ("nimble", "build") + plan.extra_flags, plan.source_dir)]
