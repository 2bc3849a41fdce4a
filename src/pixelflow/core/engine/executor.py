"""
Executor com concorrência limitada.

Executa um lote de tasks assíncronas (callables sem argumentos) com um
limite superior de tasks simultaneamente em andamento, devolvendo os
resultados na ordem original das tasks.

Política de execução:
    - limit=None → todas as tasks são lançadas imediatamente
    - limit=N    → no máximo N em andamento; a janela é reabastecida task a
      task, na ordem original, assim que qualquer uma termina (não há
      batches fixos: uma task rápida nunca espera uma lenta do mesmo lote)
    - Resultados são alinhados por índice, independente da ordem de término

Política de falha (fail-fast):
    - A primeira falha observada é atribuída ao índice da task
    - Nenhuma task nova é lançada após a primeira falha
    - Tasks já em andamento são aguardadas até o fim, não canceladas;
      falhas posteriores são descartadas em favor da primeira

Limites explícitos:
    - Não implementa retry nem timeout
    - Não conhece Steps, bindings ou colaboradores
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

from pixelflow.core.exceptions import TaskFailedError


Task = Callable[[], Union[Awaitable[Any], Any]]


def _check_limit(limit: Optional[int]) -> None:
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer or None, got {limit!r}")


async def _call(task: Task) -> Any:
    value = task()
    if inspect.isawaitable(value):
        value = await value
    return value


async def run_bounded(tasks: Sequence[Task], limit: Optional[int] = None) -> List[Any]:
    """
    Executa `tasks` respeitando o limite de concorrência.

    A janela inicial (todas as tasks quando `limit` é None) é lançada
    antes de qualquer await; cada task concluída libera uma vaga para a
    próxima, na ordem original, enquanto nenhuma falha tiver ocorrido.

    Args:
        tasks (Sequence[Task]): Callables sem argumentos que retornam awaitables.
        limit (Optional[int]): Máximo de tasks simultâneas; None = sem limite.

    Returns:
        List[Any]: Resultados na mesma ordem de `tasks`.

    Raises:
        ValueError: Se `limit` não for None nem inteiro positivo.
        TaskFailedError: Na primeira task que falhar (encadeada ao erro original).
    """
    _check_limit(limit)
    pending = list(tasks)
    total = len(pending)
    if total == 0:
        return []

    results: List[Any] = [None] * total
    failure: Optional[Tuple[int, Exception]] = None
    cursor = iter(range(total))
    running: Dict[asyncio.Task, int] = {}

    def launch() -> None:
        index = next(cursor, None)
        if index is not None:
            running[asyncio.create_task(_call(pending[index]))] = index

    for _ in range(total if limit is None else min(limit, total)):
        launch()

    try:
        while running:
            done, _ = await asyncio.wait(set(running), return_when=asyncio.FIRST_COMPLETED)
            for finished in sorted(done, key=running.__getitem__):
                index = running.pop(finished)
                exc = finished.exception()
                if exc is None:
                    results[index] = finished.result()
                elif not isinstance(exc, Exception):
                    raise exc
                elif failure is None:
                    failure = (index, exc)
            if failure is None:
                for _ in done:
                    launch()
    finally:
        for leftover in running:
            leftover.cancel()

    if failure is not None:
        index, exc = failure
        raise TaskFailedError(
            f"Task {index} failed: {exc}",
            details={"index": index, "exception_class": exc.__class__.__name__},
            index=index,
            error=exc,
        ) from exc

    return results
