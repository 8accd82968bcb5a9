"""
Svelte 4 deprecation rules.

Each rule is a compiled line pattern plus the severity, message and
remediation hint reported when it matches. Rules are evaluated independently
against every line, so one line may produce several findings. Table order
only decides output order for findings on the same line.

Severity:
    error   - breaking in Svelte 5, must be fixed
    warning - still works in Svelte 5 but deprecated
"""

import re
from dataclasses import dataclass
from typing import Optional

from migration.models import SEVERITY_ERROR, SEVERITY_WARNING

# Rune names that share the legacy `$name` store-subscription syntax.
# Any rune missing here will be misreported as a store subscription.
RUNE_NAMES = ("state", "derived", "effect", "props", "inspect")


@dataclass(frozen=True)
class MigrationRule:
    """Declarative detection rule"""

    rule_id: str
    pattern: re.Pattern
    severity: str
    message: str
    suggestion: Optional[str] = None

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


def _rule(rule_id: str, regex: str, severity: str, message: str, suggestion: Optional[str] = None) -> MigrationRule:
    return MigrationRule(
        rule_id=rule_id,
        pattern=re.compile(regex, re.ASCII),
        severity=severity,
        message=message,
        suggestion=suggestion,
    )


MIGRATION_RULES: tuple[MigrationRule, ...] = (
    # Reactive statements ($:) - only at the start of a line
    _rule(
        "reactive-statement",
        r"^\s*\$:\s+",
        SEVERITY_WARNING,
        "Reactive statement ($:) should be replaced with $derived or $effect",
        "Use $derived for computed values or $effect for side effects",
    ),
    _rule(
        "export-let",
        r"export\s+let\s+(\w+)",
        SEVERITY_WARNING,
        "export let should be replaced with $props()",
        "Replace with: let { propName } = $props()",
    ),
    _rule(
        "on-directive",
        r"\son:(\w+)=",
        SEVERITY_WARNING,
        "on: event directives should be replaced with event properties",
        "Replace on:click with onclick",
    ),
    _rule(
        "slot-usage",
        r"<slot\s+name=",
        SEVERITY_WARNING,
        "Named slots should be replaced with snippets",
        "Use {#snippet name()} and {@render name()} instead",
    ),
    _rule(
        "create-event-dispatcher",
        r"createEventDispatcher",
        SEVERITY_ERROR,
        "createEventDispatcher is deprecated in Svelte 5",
        "Use callback props instead of createEventDispatcher",
    ),
    # Shimmed in Svelte 5, so reported as a warning
    _rule(
        "lifecycle-hooks",
        r"\b(beforeUpdate|afterUpdate)\b",
        SEVERITY_WARNING,
        "beforeUpdate/afterUpdate are deprecated in Svelte 5",
        "Use $effect.pre() and $effect() instead",
    ),
    _rule(
        "store-subscription",
        r"\$(?!" + "|".join(RUNE_NAMES) + r")(\w+)\s*=",
        SEVERITY_WARNING,
        "Store auto-subscriptions with $ prefix may need to be updated",
        "Consider using $state for reactive variables",
    ),
    _rule(
        "component-instantiation",
        r"new\s+\w+\s*\(",
        SEVERITY_ERROR,
        'Component instantiation with "new" is deprecated',
        "Use mount() or hydrate() instead of new Component()",
    ),
    _rule(
        "bind-this",
        r"bind:this=",
        SEVERITY_WARNING,
        "bind:this behavior has changed in Svelte 5",
        "bind:this no longer provides $set, $on, $destroy methods",
    ),
    # Transitions only; event modifiers are covered by event-modifiers
    _rule(
        "transition-modifiers",
        r"\b(in|out|transition):(\w+)\|(?!global)",
        SEVERITY_WARNING,
        "Transition modifiers may need |global in Svelte 5",
        "Transitions are local by default, add |global if needed",
    ),
    _rule(
        "svelte-component",
        r"<svelte:component\s+this=",
        SEVERITY_WARNING,
        "svelte:component is no longer necessary in Svelte 5",
        "You can use dynamic components directly: <Thing />",
    ),
    _rule(
        "double-dollar-props",
        r"\$\$(props|restProps)",
        SEVERITY_ERROR,
        "$$props and $$restProps are deprecated",
        "Use destructuring with rest in $props(): let { foo, ...rest } = $props()",
    ),
    _rule(
        "double-dollar-slots",
        r"\$\$slots",
        SEVERITY_ERROR,
        "$$slots is deprecated in Svelte 5",
        "Use snippet parameters instead of $$slots",
    ),
    _rule(
        "let-directive",
        r"let:(\w+)",
        SEVERITY_WARNING,
        "let: directive in slots should be replaced with snippet parameters",
        "Use {#snippet name(param)} instead of let:param",
    ),
    _rule(
        "event-modifiers",
        r"\son:\w+\|(\w+)",
        SEVERITY_WARNING,
        "Event modifiers are deprecated in Svelte 5",
        "Handle event.preventDefault(), event.stopPropagation() etc. in the handler",
    ),
    _rule(
        "svelte-fragment",
        r"<svelte:fragment",
        SEVERITY_WARNING,
        "svelte:fragment should be replaced with snippets",
        "Use {#snippet} blocks instead of svelte:fragment",
    ),
    _rule(
        "svelte-component-class",
        r"SvelteComponent",
        SEVERITY_ERROR,
        "SvelteComponent class is deprecated in Svelte 5",
        "Use Component type instead for typing",
    ),
    _rule(
        "tick-function",
        r"\btick\(\)",
        SEVERITY_WARNING,
        "tick() is now async in Svelte 5",
        "Use await tick() or tick().then()",
    ),
    _rule(
        "component-set-method",
        r"\.\$set\(",
        SEVERITY_ERROR,
        "Component.$set() method is deprecated",
        "Pass props directly to components instead",
    ),
    _rule(
        "component-on-method",
        r"\.\$on\(",
        SEVERITY_ERROR,
        "Component.$on() method is deprecated",
        "Use callback props instead of $on",
    ),
    _rule(
        "component-destroy-method",
        r"\.\$destroy\(",
        SEVERITY_ERROR,
        "Component.$destroy() method is deprecated",
        "Use unmount() function instead",
    ),
    _rule(
        "dispatch-function-call",
        r"dispatch\(['\"`](\w+)['\"`]",
        SEVERITY_WARNING,
        "Event dispatching should use callback props",
        "Replace dispatch with callback props",
    ),
)


def get_rule(rule_id: str) -> Optional[MigrationRule]:
    """Look up a rule by identifier"""
    for rule in MIGRATION_RULES:
        if rule.rule_id == rule_id:
            return rule
    return None


__all__ = ["RUNE_NAMES", "MigrationRule", "MIGRATION_RULES", "get_rule"]
