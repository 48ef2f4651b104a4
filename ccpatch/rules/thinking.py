"""Thinking visibility rules.

Claude Code hides "thinking" blocks behind ctrl+o in two places:

1. the message renderer call site short-circuits with
   `if(!isTranscriptMode&&!verbose)return null`;
2. the thinking renderer shows a collapsed "∴ Thinking (ctrl+o to expand)"
   banner (or nothing) unless transcript mode or verbose is on.

Builds that still have the collapsed banner get both sites patched. Newer
builds are patched at the call sites only: drop the gate, force
isTranscriptMode to true, force hideInTranscript to false.

The table is append-only. Add a new build's literals (or reuse a regex
shape) at the end; never edit existing entries.
"""

from __future__ import annotations

import re

from ..detect import PATCHED_THINKING_RES, UNGATED_REDACTED_RE, thinking_already_patched
from ..model import Priority, TargetKind
from ..rule_base import NATIVE_ONLY, SCRIPT_ONLY, ExactRule, PatchSet, RegexRule


BANNER = "collapsed-banner"
THINKING_CALL_SITE = "thinking-call-site"
REDACTED_CALL_SITE = "redacted-call-site"
THINKING_RENDERER = "thinking-renderer"


# ---------------------------------------------------------------------------
# Literal patterns by build
# ---------------------------------------------------------------------------

BANNER_SEARCH_V2062 = (
    'function ZT2({streamMode:A}){let[Q,B]=rTA.useState(null),[G,Z]=rTA.useState(null);if(rTA.useEffect(()=>{if(A==="thinking"&&Q===null)B(Date.now());else if(A!=="thinking"&&Q!==null)Z(Date.now()-Q),B(null)},[A,Q]),A==="thinking")return GP.createElement(P,{marginTop:1},GP.createElement($,{dimColor:!0},"∴ Thinking…"));if(G!==null)return GP.createElement(P,{marginTop:1},GP.createElement($,{dimColor:!0},"∴ Thought for ",Math.max(1,Math.round(G/1000)),"s (",GP.createElement($,{dimColor:!0,bold:!0},"ctrl+o")," ","to show thinking)"));return null}'
)
BANNER_REPLACEMENT_V2062 = (
    'function ZT2({streamMode:A}){return null}'
)
THINKING_SEARCH_V2062 = (
    'case"thinking":if(!F&&!G)return null;return J3.createElement(X59,{addMargin:Q,param:A,isTranscriptMode:F,verbose:G});'
)
THINKING_REPLACEMENT_V2062 = (
    'case"thinking":return J3.createElement(X59,{addMargin:Q,param:A,isTranscriptMode:!0,verbose:G});'
)
REDACTED_THINKING_CALL_SITE_SEARCH_V2074 = (
    'case"redacted_thinking":if(!D&&!Z)return null;return J5.createElement(io2,{addMargin:Q});'
)
REDACTED_THINKING_CALL_SITE_REPLACEMENT_V2074 = (
    'case"redacted_thinking":return J5.createElement(io2,{addMargin:Q});'
)
THINKING_CALL_SITE_SEARCH_V2074 = (
    'case"thinking":if(!D&&!Z)return null;return J5.createElement(co2,{addMargin:Q,param:A,isTranscriptMode:D,verbose:Z});'
)
THINKING_CALL_SITE_REPLACEMENT_V2074 = (
    'case"thinking":return J5.createElement(co2,{addMargin:Q,param:A,isTranscriptMode:!0,verbose:Z});'
)
THINKING_RENDERER_SEARCH_V2074_VARIANT_COLLAPSED_BANNER = (
    'function co2({param:{thinking:A},addMargin:Q=!1,isTranscriptMode:B,verbose:G}){if(!A)return null;if(!(B||G))return Vs.default.createElement(T,{marginTop:Q?1:0},Vs.default.createElement(C,{dimColor:!0,italic:!0},"∴ Thinking (ctrl+o to expand)"));return Vs.default.createElement(T,{flexDirection:"column",gap:1,marginTop:Q?1:0,width:"100%"},Vs.default.createElement(C,{dimColor:!0,italic:!0},"∴ Thinking…"),Vs.default.createElement(T,{paddingLeft:2},Vs.default.createElement(C,{dimColor:!0,italic:!0},Vs.default.createElement(T$,null,A))))}'
)
THINKING_RENDERER_SEARCH_V2074_VARIANT_NULL_GATE = (
    'function co2({param:{thinking:A},addMargin:Q=!1,isTranscriptMode:B,verbose:G}){if(!A)return null;if(!(B||G))return null;return Vs.default.createElement(T,{flexDirection:"column",gap:1,marginTop:Q?1:0,width:"100%"},Vs.default.createElement(C,{dimColor:!0,italic:!0},"∴ Thinking…"),Vs.default.createElement(T,{paddingLeft:2},Vs.default.createElement(C,{dimColor:!0,italic:!0},Vs.default.createElement(T$,null,A))))}'
)
THINKING_RENDERER_REPLACEMENT_V2074 = (
    'function co2({param:{thinking:A},addMargin:Q=!1,isTranscriptMode:B,verbose:G}){if(!A)return null;return Vs.default.createElement(T,{flexDirection:"column",gap:1,marginTop:Q?1:0,width:"100%"},Vs.default.createElement(C,{dimColor:!0,italic:!0},"∴ Thinking…"),Vs.default.createElement(T,{paddingLeft:2},Vs.default.createElement(C,{dimColor:!0,italic:!0},Vs.default.createElement(T$,null,A))))}'
)
REDACTED_THINKING_CALL_SITE_SEARCH_V211 = (
    'case"redacted_thinking":if(!D&&!Z)return null;return o8.createElement(ya2,{addMargin:Q});'
)
REDACTED_THINKING_CALL_SITE_REPLACEMENT_V211 = (
    'case"redacted_thinking":return o8.createElement(ya2,{addMargin:Q});'
)
THINKING_CALL_SITE_SEARCH_V211 = (
    'case"thinking":{if(!D&&!Z)return null;return o8.createElement(NbA,{addMargin:Q,param:A,isTranscriptMode:D,verbose:Z,hideInTranscript:D&&!(!$||z===$)})}'
)
THINKING_CALL_SITE_REPLACEMENT_V211 = (
    'case"thinking":{return o8.createElement(NbA,{addMargin:Q,param:A,isTranscriptMode:!0,verbose:Z,hideInTranscript:!1})}'
)
THINKING_RENDERER_SEARCH_V211_VARIANT_COLLAPSED_BANNER = (
    'function NbA({param:{thinking:A},addMargin:Q=!1,isTranscriptMode:B,verbose:G,hideInTranscript:Z=!1}){if(!A)return null;if(Z)return null;if(!(B||G))return $6A.default.createElement(T,{marginTop:Q?1:0},$6A.default.createElement(C,{dimColor:!0,italic:!0},"∴ Thinking (ctrl+o to expand)"));return $6A.default.createElement(T,{flexDirection:"column",gap:1,marginTop:Q?1:0,width:"100%"},$6A.default.createElement(C,{dimColor:!0,italic:!0},"∴ Thinking…"),$6A.default.createElement(T,{paddingLeft:2},$6A.default.createElement(uV,null,A)))}'
)
THINKING_RENDERER_SEARCH_V211_VARIANT_NULL_GATE = (
    'function NbA({param:{thinking:A},addMargin:Q=!1,isTranscriptMode:B,verbose:G,hideInTranscript:Z=!1}){if(!A)return null;if(Z)return null;if(!(B||G))return null;return $6A.default.createElement(T,{flexDirection:"column",gap:1,marginTop:Q?1:0,width:"100%"},$6A.default.createElement(C,{dimColor:!0,italic:!0},"∴ Thinking…"),$6A.default.createElement(T,{paddingLeft:2},$6A.default.createElement(uV,null,A)))}'
)
THINKING_RENDERER_REPLACEMENT_V211 = (
    'function NbA({param:{thinking:A},addMargin:Q=!1,isTranscriptMode:B,verbose:G,hideInTranscript:Z=!1}){if(!A)return null;return $6A.default.createElement(T,{flexDirection:"column",gap:1,marginTop:Q?1:0,width:"100%"},$6A.default.createElement(C,{dimColor:!0,italic:!0},"∴ Thinking…"),$6A.default.createElement(T,{paddingLeft:2},$6A.default.createElement(uV,null,A)))}'
)
REDACTED_THINKING_CALL_SITE_SEARCH_V2117 = (
    'case"redacted_thinking":{if(!D&&!H)return null;let N;if(K[20]!==Y)N=Y9.createElement(aU7,{addMargin:Y}),K[20]=Y,K[21]=N;else N=K[21];return N}'
)
REDACTED_THINKING_CALL_SITE_REPLACEMENT_V2117 = (
    'case"redacted_thinking":{let N;if(K[20]!==Y)N=Y9.createElement(aU7,{addMargin:Y}),K[20]=Y,K[21]=N;else N=K[21];return N}'
)
THINKING_CALL_SITE_SEARCH_V2117 = (
    'case"thinking":{if(!D&&!H)return null;let T=D&&!(!P||f===P),k;if(K[22]!==Y||K[23]!==D||K[24]!==q||K[25]!==T||K[26]!==H)k=Y9.createElement(YW1,{addMargin:Y,param:q,isTranscriptMode:D,verbose:H,hideInTranscript:T}),K[22]=Y,K[23]=D,K[24]=q,K[25]=T,K[26]=H,K[27]=k;else k=K[27];return k}'
)
THINKING_CALL_SITE_REPLACEMENT_V2117 = (
    'case"thinking":{let T=D&&!(!P||f===P),k;if(K[22]!==Y||K[23]!==D||K[24]!==q||K[25]!==T||K[26]!==H)k=Y9.createElement(YW1,{addMargin:Y,param:q,isTranscriptMode:!0,verbose:H,hideInTranscript:!1}),K[22]=Y,K[23]=D,K[24]=q,K[25]=T,K[26]=H,K[27]=k;else k=K[27];return k}'
)
REDACTED_THINKING_CALL_SITE_SEARCH_V2117_NATIVE = (
    'case"redacted_thinking":if(!X&&!E)return null;return t9.createElement(j_1,{addMargin:A});'
)
REDACTED_THINKING_CALL_SITE_REPLACEMENT_V2117_NATIVE = (
    'case"redacted_thinking":return t9.createElement(j_1,{addMargin:A});'
)
THINKING_CALL_SITE_SEARCH_V2117_NATIVE = (
    'case"thinking":{if(!X&&!E)return null;return t9.createElement(FKA,{addMargin:A,param:H,isTranscriptMode:X,verbose:E,hideInTranscript:X&&!(!K||J===K)})}'
)
THINKING_CALL_SITE_REPLACEMENT_V2117_NATIVE = (
    'case"thinking":{return t9.createElement(FKA,{addMargin:A,param:H,isTranscriptMode:!0,verbose:E,hideInTranscript:!1})}'
)
REDACTED_THINKING_CALL_SITE_SEARCH_V2120 = (
    'case"redacted_thinking":{if(!D&&!H&&!T)return null;let k;if(K[21]!==Y)k=H9.createElement(i6K,{addMargin:Y}),K[21]=Y,K[22]=k;else k=K[22];return k}'
)
REDACTED_THINKING_CALL_SITE_REPLACEMENT_V2120 = (
    'case"redacted_thinking":{let k;if(K[21]!==Y)k=H9.createElement(i6K,{addMargin:Y}),K[21]=Y,K[22]=k;else k=K[22];return k}'
)
THINKING_CALL_SITE_SEARCH_V2120 = (
    'case"thinking":{if(!D&&!H&&!T)return null;let R=D&&!(!V||P===V)&&!T,b;if(K[23]!==Y||K[24]!==D||K[25]!==q||K[26]!==R||K[27]!==H)b=H9.createElement(Ej1,{addMargin:Y,param:q,isTranscriptMode:D,verbose:H,hideInTranscript:R}),K[23]=Y,K[24]=D,K[25]=q,K[26]=R,K[27]=H,K[28]=b;else b=K[28];return b}'
)
THINKING_CALL_SITE_REPLACEMENT_V2120 = (
    'case"thinking":{let R=D&&!(!V||P===V)&&!T,b;if(K[23]!==Y||K[24]!==D||K[25]!==q||K[26]!==R||K[27]!==H)b=H9.createElement(Ej1,{addMargin:Y,param:q,isTranscriptMode:!0,verbose:H,hideInTranscript:!1}),K[23]=Y,K[24]=D,K[25]=q,K[26]=R,K[27]=H,K[28]=b;else b=K[28];return b}'
)


# ---------------------------------------------------------------------------
# Structural regexes (identifier names vary per build)
# ---------------------------------------------------------------------------

ID = r"[$\w]+"
GATE2 = rf"if\(!{ID}&&!{ID}\)return null;"
GATE3 = rf"if\(!{ID}&&!{ID}&&!{ID}\)return null;"
GATE2_OR_3 = rf"if\(!{ID}&&!{ID}(?:&&!{ID})?\)return null;"
ANY_GATE = r"if\([^)]*\)return null;"

# 2.1.14: the whole call site in one match
REDACTED_CALL_SITE_RE_V2114 = re.compile(
    rf'(case"redacted_thinking":){GATE2}(return {ID}\.createElement\({ID},\{{addMargin:{ID}\}}\);)'
)
THINKING_CALL_SITE_RE_V2114 = re.compile(
    rf'(case"thinking":)\{{{GATE2}return ({ID}\.createElement\({ID},\{{addMargin:{ID},param:{ID},isTranscriptMode:)'
    rf'({ID})(,verbose:)({ID})(,hideInTranscript:)([^}}]+)\}}\)\}}'
)


# 2.1.15 - 2.1.19: memo-cache call sites, gate and arguments patched separately
def _gate_re(case: str, gate: str) -> re.Pattern[str]:
    return re.compile(rf'(case"{case}":)\{{{gate}')


def _call_site_args_re(reach: int) -> re.Pattern[str]:
    return re.compile(
        rf'(case"thinking":[\s\S]{{0,{reach}}}?createElement\({ID},\{{addMargin:{ID},param:{ID},isTranscriptMode:)'
        rf'({ID})(,verbose:)({ID})(,hideInTranscript:)({ID})(\}}\))'
    )


# 2.1.20+: one match covers gate and arguments so native builds stay length-neutral
REDACTED_GATE_RE_V2120 = re.compile(rf'(case"redacted_thinking":\{{?)({ANY_GATE})')
THINKING_VISIBILITY_RE_V2120 = re.compile(
    rf'(case"thinking":\{{?)({ANY_GATE})'
    rf'([\s\S]{{0,1200}}?createElement\({ID},\{{addMargin:{ID},param:{ID},isTranscriptMode:)'
    r'([^,}]+)(,verbose:)([^,}]+)(,hideInTranscript:)([^,}]+)(\}\))'
)
# 2.1.30+: the call site no longer passes verbose
THINKING_VISIBILITY_RE_V2130 = re.compile(
    rf'(case"thinking":\{{?)({ANY_GATE})'
    rf'([\s\S]{{0,1400}}?createElement\({ID},\{{addMargin:{ID},param:{ID},isTranscriptMode:)'
    r'([^,}]+)(,hideInTranscript:)([^,}]+)(\}\))'
)

# Unscoped native fallbacks for bun-packed binaries whose identifiers differ
NATIVE_REDACTED_RE = re.compile(
    rf'(case"redacted_thinking":){GATE2_OR_3}(return {ID}\.createElement\({ID},\{{addMargin:{ID}\}}\);)'
)
NATIVE_REDACTED_BRACES_RE = re.compile(
    rf'(case"redacted_thinking":)\{{{GATE2_OR_3}(return {ID}\.createElement\({ID},\{{addMargin:{ID}\}}\);)\}}'
)
NATIVE_THINKING_NEW_RE = re.compile(
    rf'(case"thinking":)\{{{GATE2_OR_3}return ({ID}\.createElement\({ID},\{{addMargin:{ID},param:{ID},isTranscriptMode:)'
    rf'({ID})(,verbose:)({ID})(,hideInTranscript:)([^,}}]+)([^}}]*)(\}}\);?\}})'
)
NATIVE_THINKING_OLD_RE = re.compile(
    rf'(case"thinking":){GATE2_OR_3}(return {ID}\.createElement\({ID},\{{addMargin:{ID},param:{ID},isTranscriptMode:)'
    rf'({ID})(,verbose:)({ID})(\}}\);?)'
)


def _reopen_case(m: re.Match[str]) -> str:
    return m.group(1)


def _join_case_and_return(m: re.Match[str]) -> str:
    return m.group(1) + m.group(2)


def _reopen_brace(m: re.Match[str]) -> str:
    return m.group(1) + "{"


def _v2114_thinking(m: re.Match[str]) -> str:
    return f"{m[1]}{{return {m[2]}!0{m[4]}{m[5]}{m[6]}!1}})}}"


def _force_args(m: re.Match[str]) -> str:
    return f"{m[1]}!0{m[3]}{m[4]}{m[5]}!1{m[7]}"


def _visibility_with_verbose(m: re.Match[str]) -> str:
    return f"{m[1]}{m[3]}!0{m[5]}{m[6]}{m[7]}!1{m[9]}"


def _visibility_without_verbose(m: re.Match[str]) -> str:
    return f"{m[1]}{m[3]}!0{m[5]}!1{m[7]}"


def _native_redacted_braces(m: re.Match[str]) -> str:
    return f"{m[1]}{{{m[2]}}}"


def _native_thinking_new(m: re.Match[str]) -> str:
    return f"{m[1]}{{return {m[2]}!0{m[4]}{m[5]}{m[6]}!1{m[8]}{m[9]}"


def _native_thinking_old(m: re.Match[str]) -> str:
    return f"{m[1]}{m[2]}!0{m[4]}{m[5]}{m[6]}"


PATCHED_THINKING_RE = PATCHED_THINKING_RES[0]


def _gate_and_args_rules(version: str, gate: str, reach: int) -> list[RegexRule]:
    """2.1.15-style fallback: reopen the case block without its gate, force the args."""
    return [
        RegexRule(
            name=f"v{version} redacted_thinking call site gate (regex)",
            group=REDACTED_CALL_SITE,
            pattern=_gate_re("redacted_thinking", gate),
            transform=_reopen_brace,
            version=version,
            kinds=SCRIPT_ONLY,
        ),
        RegexRule(
            name=f"v{version} thinking call site gate (regex)",
            group=THINKING_CALL_SITE,
            pattern=_gate_re("thinking", gate),
            transform=_reopen_brace,
            version=version,
            kinds=SCRIPT_ONLY,
        ),
        RegexRule(
            name=f"v{version} thinking call site args (regex)",
            group=THINKING_CALL_SITE,
            pattern=_call_site_args_re(reach),
            transform=_force_args,
            version=version,
            kinds=SCRIPT_ONLY,
        ),
    ]


def _visibility_rules(version: str, with_verbose: bool) -> list[RegexRule]:
    """2.1.20-style fallback: strip the redacted gate, rewrite the thinking call site in one match."""
    return [
        RegexRule(
            name=f"v{version} redacted_thinking call site gate (regex)",
            group=REDACTED_CALL_SITE,
            pattern=REDACTED_GATE_RE_V2120,
            transform=_reopen_case,
            version=version,
            applied_pattern=UNGATED_REDACTED_RE,
        ),
        RegexRule(
            name=f"v{version} thinking visibility (regex)",
            group=THINKING_CALL_SITE,
            pattern=THINKING_VISIBILITY_RE_V2120 if with_verbose else THINKING_VISIBILITY_RE_V2130,
            transform=_visibility_with_verbose if with_verbose else _visibility_without_verbose,
            version=version,
            applied_pattern=PATCHED_THINKING_RE,
        ),
    ]


THINKING_RULES: list = [
    # 2.0.62: collapsed banner component plus ungated call site
    ExactRule(
        name="v2.0.62 thinking banner",
        group=BANNER,
        search=(BANNER_SEARCH_V2062,),
        replacement=BANNER_REPLACEMENT_V2062,
        version="2.0.62",
    ),
    ExactRule(
        name="v2.0.62 thinking call site",
        group=THINKING_CALL_SITE,
        search=(THINKING_SEARCH_V2062,),
        replacement=THINKING_REPLACEMENT_V2062,
        version="2.0.62",
    ),
    # 2.0.74: call sites plus the renderer's collapsed branch
    ExactRule(
        name="v2.0.74 redacted_thinking call site",
        group=REDACTED_CALL_SITE,
        search=(REDACTED_THINKING_CALL_SITE_SEARCH_V2074,),
        replacement=REDACTED_THINKING_CALL_SITE_REPLACEMENT_V2074,
        version="2.0.74",
    ),
    ExactRule(
        name="v2.0.74 thinking call site",
        group=THINKING_CALL_SITE,
        search=(THINKING_CALL_SITE_SEARCH_V2074,),
        replacement=THINKING_CALL_SITE_REPLACEMENT_V2074,
        version="2.0.74",
    ),
    ExactRule(
        name="v2.0.74 thinking renderer",
        group=THINKING_RENDERER,
        search=(
            THINKING_RENDERER_SEARCH_V2074_VARIANT_COLLAPSED_BANNER,
            THINKING_RENDERER_SEARCH_V2074_VARIANT_NULL_GATE,
        ),
        replacement=THINKING_RENDERER_REPLACEMENT_V2074,
        version="2.0.74",
    ),
    # 2.1.1
    ExactRule(
        name="v2.1.1 redacted_thinking call site",
        group=REDACTED_CALL_SITE,
        search=(REDACTED_THINKING_CALL_SITE_SEARCH_V211,),
        replacement=REDACTED_THINKING_CALL_SITE_REPLACEMENT_V211,
        version="2.1.1",
    ),
    ExactRule(
        name="v2.1.1 thinking call site",
        group=THINKING_CALL_SITE,
        search=(THINKING_CALL_SITE_SEARCH_V211,),
        replacement=THINKING_CALL_SITE_REPLACEMENT_V211,
        version="2.1.1",
    ),
    ExactRule(
        name="v2.1.1 thinking renderer",
        group=THINKING_RENDERER,
        search=(
            THINKING_RENDERER_SEARCH_V211_VARIANT_COLLAPSED_BANNER,
            THINKING_RENDERER_SEARCH_V211_VARIANT_NULL_GATE,
        ),
        replacement=THINKING_RENDERER_REPLACEMENT_V211,
        version="2.1.1",
    ),
    # 2.1.14: call sites only, identifiers too unstable for literals
    RegexRule(
        name="v2.1.14 redacted_thinking call site (regex)",
        group=REDACTED_CALL_SITE,
        pattern=REDACTED_CALL_SITE_RE_V2114,
        transform=_join_case_and_return,
        version="2.1.14",
        kinds=SCRIPT_ONLY,
    ),
    RegexRule(
        name="v2.1.14 thinking call site (regex)",
        group=THINKING_CALL_SITE,
        pattern=THINKING_CALL_SITE_RE_V2114,
        transform=_v2114_thinking,
        version="2.1.14",
        kinds=SCRIPT_ONLY,
    ),
    *_gate_and_args_rules("2.1.15", GATE2, 800),
    # 2.1.17: memo-cache call sites in npm builds, plain switch in native builds
    ExactRule(
        name="v2.1.17 redacted_thinking call site",
        group=REDACTED_CALL_SITE,
        search=(REDACTED_THINKING_CALL_SITE_SEARCH_V2117,),
        replacement=REDACTED_THINKING_CALL_SITE_REPLACEMENT_V2117,
        version="2.1.17",
    ),
    ExactRule(
        name="v2.1.17 thinking call site",
        group=THINKING_CALL_SITE,
        search=(THINKING_CALL_SITE_SEARCH_V2117,),
        replacement=THINKING_CALL_SITE_REPLACEMENT_V2117,
        version="2.1.17",
    ),
    ExactRule(
        name="v2.1.17 native redacted_thinking call site",
        group=REDACTED_CALL_SITE,
        search=(REDACTED_THINKING_CALL_SITE_SEARCH_V2117_NATIVE,),
        replacement=REDACTED_THINKING_CALL_SITE_REPLACEMENT_V2117_NATIVE,
        version="2.1.17",
        kinds=NATIVE_ONLY,
    ),
    ExactRule(
        name="v2.1.17 native thinking call site",
        group=THINKING_CALL_SITE,
        search=(THINKING_CALL_SITE_SEARCH_V2117_NATIVE,),
        replacement=THINKING_CALL_SITE_REPLACEMENT_V2117_NATIVE,
        version="2.1.17",
        kinds=NATIVE_ONLY,
    ),
    *_gate_and_args_rules("2.1.17", GATE2, 800),
    *_gate_and_args_rules("2.1.19", GATE3, 900),
    # 2.1.20
    ExactRule(
        name="v2.1.20 redacted_thinking call site",
        group=REDACTED_CALL_SITE,
        search=(REDACTED_THINKING_CALL_SITE_SEARCH_V2120,),
        replacement=REDACTED_THINKING_CALL_SITE_REPLACEMENT_V2120,
        version="2.1.20",
    ),
    ExactRule(
        name="v2.1.20 thinking call site",
        group=THINKING_CALL_SITE,
        search=(THINKING_CALL_SITE_SEARCH_V2120,),
        replacement=THINKING_CALL_SITE_REPLACEMENT_V2120,
        version="2.1.20",
    ),
    *[rule for v in ("2.1.20", "2.1.22", "2.1.23", "2.1.27") for rule in _visibility_rules(v, with_verbose=True)],
    *[
        rule
        for v in ("2.1.30", "2.1.31", "2.1.32", "2.1.33", "2.1.34", "2.1.36", "2.1.37", "2.1.38")
        for rule in _visibility_rules(v, with_verbose=False)
    ],
    # Any native build: unversioned, length-preserving
    RegexRule(
        name="native redacted_thinking call site (regex)",
        group=REDACTED_CALL_SITE,
        pattern=NATIVE_REDACTED_RE,
        transform=_join_case_and_return,
        kinds=NATIVE_ONLY,
        priority=Priority.HEURISTIC,
        version_gated=False,
    ),
    RegexRule(
        name="native redacted_thinking call site (regex, braces)",
        group=REDACTED_CALL_SITE,
        pattern=NATIVE_REDACTED_BRACES_RE,
        transform=_native_redacted_braces,
        kinds=NATIVE_ONLY,
        priority=Priority.HEURISTIC,
        version_gated=False,
    ),
    RegexRule(
        name="native thinking call site (regex, new format)",
        group=THINKING_CALL_SITE,
        pattern=NATIVE_THINKING_NEW_RE,
        transform=_native_thinking_new,
        kinds=NATIVE_ONLY,
        priority=Priority.HEURISTIC,
        version_gated=False,
    ),
    RegexRule(
        name="native thinking call site (regex, old format)",
        group=THINKING_CALL_SITE,
        pattern=NATIVE_THINKING_OLD_RE,
        transform=_native_thinking_old,
        kinds=NATIVE_ONLY,
        priority=Priority.HEURISTIC,
        version_gated=False,
    ),
]


def build_thinking_patch_set() -> PatchSet:
    patch_set = PatchSet(
        name="thinking",
        title="Thinking visibility",
        rules=list(THINKING_RULES),
    )
    known = tuple(patch_set.known_replacements())

    def detector(content: str, kind: TargetKind) -> bool:
        return thinking_already_patched(content, kind, known)

    patch_set.detector = detector
    return patch_set
