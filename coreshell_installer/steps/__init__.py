from .base import BaseStep
from .step_00_prepare import PrepareDirectoriesStep, TerminfoStep
from .step_10_sudo import AptUpdateStep, InstallSudoStep, SudoAccessStep
from .step_20_git import InstallGitStep
from .step_30_homebrew import HomebrewAnalyticsStep, HomebrewUpdateStep, InstallHomebrewStep
from .step_40_github_cli import InstallGithubCliStep
from .step_50_repositories import FetchRepositoriesStep, LinkWorkspaceStep
from .step_60_zsh import DefaultShellStep, InstallZshStep, ZshConfigStep
from .step_70_oh_my_zsh import InstallOhMyZshStep, OhMyZshPluginsStep
from .step_80_oh_my_posh import InstallOhMyPoshStep
from .step_90_tools import BashFallbackStep, LinkStep, LocalesStep, PackageStep, mc_skins

__all__ = [
    "BaseStep",
    "PrepareDirectoriesStep",
    "TerminfoStep",
    "InstallSudoStep",
    "SudoAccessStep",
    "AptUpdateStep",
    "InstallGitStep",
    "InstallHomebrewStep",
    "HomebrewAnalyticsStep",
    "HomebrewUpdateStep",
    "InstallGithubCliStep",
    "FetchRepositoriesStep",
    "LinkWorkspaceStep",
    "InstallZshStep",
    "DefaultShellStep",
    "ZshConfigStep",
    "InstallOhMyZshStep",
    "OhMyZshPluginsStep",
    "InstallOhMyPoshStep",
    "LocalesStep",
    "PackageStep",
    "LinkStep",
    "BashFallbackStep",
    "mc_skins",
]
