"""
This module contains the tech stack analyzer plugin for the repository analyzer.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from analyzers.models import TechCategory, TechStackTags
from miners.models import LanguageBreakdown, Manifest


@dataclass(frozen=True)
class StackContext:
    """Inputs the classification rules look at."""

    dependencies: Dict[str, str]
    languages: LanguageBreakdown
    description: str


@dataclass(frozen=True)
class StackRule:
    """A single classification rule: when predicate matches, add tag to category."""

    predicate: Callable[[StackContext], bool]
    category: TechCategory
    tag: str


def dependency_rule(package: str, category: TechCategory, tag: str) -> StackRule:
    """Match when package is a runtime or dev dependency (exact, case-sensitive)."""
    return StackRule(lambda ctx: package in ctx.dependencies, category, tag)


def language_rule(language: str, tag: Optional[str] = None) -> StackRule:
    """Match when the repository contains code in language."""
    return StackRule(
        lambda ctx: language in ctx.languages, TechCategory.BACKEND, tag or language
    )


def description_rule(keyword: str, language: str, tag: str) -> StackRule:
    """
    Match when the description mentions keyword (case-insensitive) and the
    repository contains code in the framework's host language.
    """
    keyword = keyword.lower()
    return StackRule(
        lambda ctx: keyword in ctx.description.lower() and language in ctx.languages,
        TechCategory.BACKEND,
        tag,
    )


DEFAULT_RULES = (
    # Frontend frameworks
    dependency_rule("react", TechCategory.FRONTEND, "React"),
    dependency_rule("vue", TechCategory.FRONTEND, "Vue.js"),
    dependency_rule("angular", TechCategory.FRONTEND, "Angular"),
    dependency_rule("next", TechCategory.FRONTEND, "Next.js"),
    dependency_rule("nuxt", TechCategory.FRONTEND, "Nuxt.js"),
    # Backend frameworks
    dependency_rule("express", TechCategory.BACKEND, "Express.js"),
    dependency_rule("koa", TechCategory.BACKEND, "Koa.js"),
    dependency_rule("fastify", TechCategory.BACKEND, "Fastify"),
    dependency_rule("@nestjs/core", TechCategory.BACKEND, "NestJS"),
    # Databases
    dependency_rule("mongoose", TechCategory.DATABASE, "MongoDB"),
    dependency_rule("mongodb", TechCategory.DATABASE, "MongoDB"),
    dependency_rule("sequelize", TechCategory.DATABASE, "SQL"),
    dependency_rule("prisma", TechCategory.DATABASE, "Prisma"),
    # Testing and tools
    dependency_rule("jest", TechCategory.TOOLS, "Jest"),
    dependency_rule("typescript", TechCategory.TOOLS, "TypeScript"),
    dependency_rule("webpack", TechCategory.TOOLS, "Webpack"),
    # Languages
    language_rule("Python"),
    language_rule("Java"),
    language_rule("Go"),
    language_rule("Ruby"),
    # Python frameworks have no manifest to look at
    description_rule("django", "Python", "Django"),
    description_rule("flask", "Python", "Flask"),
)


class StackAnalyzerPlugin:
    """Base class for tech stack analyzer plugins."""

    def categorize(
        self,
        manifest: Optional[Manifest],
        languages: Optional[LanguageBreakdown],
        description: Optional[str],
    ) -> TechStackTags:
        """Classify a repository's tech stack."""
        raise NotImplementedError


class RuleBasedStackAnalyzerPlugin(StackAnalyzerPlugin):
    """
    Classifies repositories with a static table of rules.

    Every rule is checked independently; tags accumulate into per-category sets.

    Attributes:
        rules (Sequence[StackRule]): Classification rules
    """

    def __init__(self, rules: Optional[Sequence[StackRule]] = None):
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES

    def categorize(
        self,
        manifest: Optional[Manifest],
        languages: Optional[LanguageBreakdown],
        description: Optional[str],
    ) -> TechStackTags:
        """
        Classify a repository's tech stack.

        Args:
            manifest (Optional[Manifest]): Parsed manifest, None when absent
            languages (Optional[LanguageBreakdown]): Language byte counts
            description (Optional[str]): Repository description

        Example:
            manifest = Manifest(dependencies={"react": "^18.0.0"})
            languages = {"JavaScript": 1000}
            -> TechStackTags(frontend={"React"})

        Returns:
            TechStackTags: Tags per category, empty sets when nothing matches.
        """
        context = StackContext(
            dependencies=manifest.all_dependencies if manifest else {},
            languages=languages or {},
            description=description or "",
        )

        tags = TechStackTags()
        for rule in self.rules:
            if rule.predicate(context):
                tags.add(rule.category, rule.tag)
        return tags
