"""CI vendor detection.

Lookups are pure: they read an environment mapping (``os.environ`` unless one
is passed) and never raise.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

LOCAL_CONTEXT = "LOCAL"


@dataclass(frozen=True)
class Vendor:
    name: str
    constant: str
    # Every variable in ``env_all`` must be set.
    env_all: tuple[str, ...] = ()
    # At least one variable in ``env_any`` must be set.
    env_any: tuple[str, ...] = ()
    # Variables that must hold an exact value.
    env_equals: Mapping[str, str] = field(default_factory=dict)

    def matches(self, env: Mapping[str, str]) -> bool:
        if self.env_all and not all(env.get(key) for key in self.env_all):
            return False
        if self.env_any and not any(env.get(key) for key in self.env_any):
            return False
        for key, expected in self.env_equals.items():
            if env.get(key) != expected:
                return False
        return bool(self.env_all or self.env_any or self.env_equals)


VENDORS: tuple[Vendor, ...] = (
    Vendor("AppVeyor", "APPVEYOR", env_all=("APPVEYOR",)),
    Vendor("AWS CodeBuild", "CODEBUILD", env_all=("CODEBUILD_BUILD_ARN",)),
    Vendor(
        "Azure Pipelines",
        "AZURE_PIPELINES",
        env_all=("SYSTEM_TEAMFOUNDATIONCOLLECTIONURI",),
    ),
    Vendor("Bamboo", "BAMBOO", env_all=("bamboo_planKey",)),
    Vendor("Bitbucket Pipelines", "BITBUCKET", env_all=("BITBUCKET_COMMIT",)),
    Vendor("Bitrise", "BITRISE", env_all=("BITRISE_IO",)),
    Vendor("Buddy", "BUDDY", env_all=("BUDDY_WORKSPACE_ID",)),
    Vendor("Buildkite", "BUILDKITE", env_all=("BUILDKITE",)),
    Vendor("CircleCI", "CIRCLE", env_all=("CIRCLECI",)),
    Vendor("Cirrus CI", "CIRRUS", env_all=("CIRRUS_CI",)),
    Vendor("Cloudflare Pages", "CLOUDFLARE_PAGES", env_all=("CF_PAGES",)),
    Vendor("Codefresh", "CODEFRESH", env_all=("CF_BUILD_ID",)),
    Vendor("Codemagic", "CODEMAGIC", env_all=("CM_BUILD_ID",)),
    Vendor("Drone", "DRONE", env_all=("DRONE",)),
    Vendor("GitHub Actions", "GITHUB_ACTIONS", env_all=("GITHUB_ACTIONS",)),
    Vendor("GitLab CI", "GITLAB", env_all=("GITLAB_CI",)),
    Vendor("GoCD", "GOCD", env_all=("GO_PIPELINE_LABEL",)),
    Vendor("Google Cloud Build", "GOOGLE_CLOUD_BUILD", env_all=("BUILDER_OUTPUT",)),
    Vendor("Jenkins", "JENKINS", env_all=("JENKINS_URL", "BUILD_ID")),
    Vendor("Netlify CI", "NETLIFY", env_all=("NETLIFY",)),
    Vendor("Render", "RENDER", env_all=("RENDER",)),
    Vendor("Semaphore", "SEMAPHORE", env_all=("SEMAPHORE",)),
    Vendor("TeamCity", "TEAMCITY", env_all=("TEAMCITY_VERSION",)),
    Vendor("Travis CI", "TRAVIS", env_all=("TRAVIS",)),
    Vendor("Vercel", "VERCEL", env_any=("NOW_BUILDER", "VERCEL")),
    Vendor("Woodpecker", "WOODPECKER", env_equals={"CI": "woodpecker"}),
    Vendor("Xcode Cloud", "XCODE", env_all=("CI_XCODE_PROJECT",)),
)


def infer_vendor(env: Mapping[str, str] | None = None) -> Vendor | None:
    source = os.environ if env is None else env
    for vendor in VENDORS:
        if vendor.matches(source):
            return vendor
    return None


def get_constant(env: Mapping[str, str] | None = None) -> str | None:
    vendor = infer_vendor(env)
    return vendor.constant if vendor else None


def run_context(vendor: Vendor | None) -> str:
    return vendor.constant if vendor else LOCAL_CONTEXT
