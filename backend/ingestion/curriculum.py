"""
Builtin Curriculum Graph

The system-call / concept graph of the Linux system programming course, in
the same document shape the content pipeline writes to knowledge-base.json.
"""

from __future__ import annotations
from typing import Any, Dict, List

SYSCALLS = [
    ("open", "file_io", 3),
    ("close", "file_io", 3),
    ("read", "file_io", 3),
    ("write", "file_io", 3),
    ("lseek", "file_io", 3),
    ("dup", "file_io", 3),
    ("dup2", "file_io", 3),
    ("fork", "process", 6),
    ("execve", "process", 6),
    ("wait", "process", 6),
    ("waitpid", "process", 6),
    ("exit", "process", 6),
    ("_exit", "process", 6),
    ("getpid", "process", 4),
    ("getppid", "process", 4),
    ("sigaction", "signals", 5),
    ("sigprocmask", "signals", 5),
    ("kill", "signals", 5),
    ("pause", "signals", 5),
    ("alarm", "signals", 5),
]

CONCEPTS = [
    ("file_descriptor", "file_io"),
    ("errno", "fundamentals"),
    ("process", "process"),
    ("signal", "signals"),
    ("zombie", "process"),
    ("orphan", "process"),
]

SYSCALL_RELATIONS = [
    ("open", "close", "lifecycle"),
    ("open", "read", "uses"),
    ("open", "write", "uses"),
    ("read", "write", "related"),
    ("fork", "execve", "often_paired"),
    ("fork", "wait", "often_paired"),
    ("fork", "exit", "child_calls"),
    ("wait", "waitpid", "variant"),
    ("exit", "_exit", "calls"),
    ("sigaction", "sigprocmask", "related"),
    ("sigaction", "kill", "related"),
    ("kill", "pause", "related"),
    ("fork", "getpid", "uses"),
    ("fork", "getppid", "uses"),
]

CONCEPT_RELATIONS = [
    ("file_descriptor", "open", "returned_by"),
    ("file_descriptor", "close", "used_by"),
    ("process", "fork", "created_by"),
    ("zombie", "wait", "reaped_by"),
    ("signal", "sigaction", "handled_by"),
]

CLUSTERS = {
    "file_io": {"label": "File I/O", "color": "#21409a"},
    "process": {"label": "Process Management", "color": "#be1e2d"},
    "signals": {"label": "Signals", "color": "#f9a825"},
    "fundamentals": {"label": "Fundamentals", "color": "#4caf50"},
}


def build_curriculum_graph() -> Dict[str, Any]:
    """Return the raw (prefixed-id) graph document."""
    nodes: List[Dict[str, Any]] = []
    edges: List[Dict[str, Any]] = []

    for name, cluster, chapter in SYSCALLS:
        nodes.append({
            "id": f"sc_{name}", "type": "syscall", "label": name,
            "cluster": cluster, "chapter": chapter,
        })

    for name, cluster in CONCEPTS:
        nodes.append({"id": f"concept_{name}", "type": "concept", "label": name, "cluster": cluster})

    for source, target, relation in SYSCALL_RELATIONS:
        edges.append({"source": f"sc_{source}", "target": f"sc_{target}", "type": relation})

    for source, target, relation in CONCEPT_RELATIONS:
        edges.append({"source": f"concept_{source}", "target": f"sc_{target}", "type": relation})

    return {"nodes": nodes, "edges": edges, "clusters": dict(CLUSTERS)}
