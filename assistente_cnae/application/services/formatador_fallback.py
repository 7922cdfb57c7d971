# assistente_cnae/application/services/formatador_fallback.py
#
# Deterministic answers used when the formatter LLM is unavailable or its output
# is rejected by the leakage guard. Pure functions over ResultadoConsulta; the
# public entry point never raises.
from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from assistente_cnae.domain.cnae.entities import CnaeItem, ItemNbs, ItemServico
from assistente_cnae.domain.cnae.value_objects import GrauRisco
from assistente_cnae.domain.consulta.entities import (
    BuscaTexto,
    InformacaoCompletaCnae,
    ResultadoConsulta,
)
from assistente_cnae.domain.consulta.value_objects import QueryId
from assistente_cnae.infrastructure.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

TAMANHO_DESCRICAO = 100
LIMITE_BUSCA_TEXTO = 5
LIMITE_LISTA = 10

RESPOSTA_GENERICA = (
    "Encontrei dados para a sua consulta, mas não consegui montar a resposta agora. "
    "Pode tentar novamente em instantes? 😊"
)

_EMOJI_RISCO = {GrauRisco.ALTO: "🔴", GrauRisco.MEDIO: "🟡", GrauRisco.BAIXO: "🟢"}

_EXPLICACAO_RISCO = {
    GrauRisco.ALTO: (
        "⚠️ Este CNAE possui grau de risco alto: as atividades requerem maior atenção "
        "quanto à fiscalização e conformidade tributária."
    ),
    GrauRisco.MEDIO: (
        "ℹ️ Este CNAE possui grau de risco médio. Recomendo manter a documentação fiscal "
        "sempre organizada e em dia."
    ),
    GrauRisco.BAIXO: (
        "✅ Este CNAE possui grau de risco baixo, mas é importante manter as obrigações "
        "fiscais em dia."
    ),
}

_RODAPE = "💬 Posso ajudar com mais alguma informação?"


def _exigir(valor: object, tipo: type[T]) -> T:
    if not isinstance(valor, tipo):
        raise TypeError(f"esperado {tipo.__name__}, recebido {type(valor).__name__}")
    return valor


def _truncar(texto: str | None, limite: int = TAMANHO_DESCRICAO) -> str:
    texto = texto or ""
    return texto if len(texto) <= limite else texto[:limite] + "..."


def _sim_nao(valor: bool | None) -> str:
    return "Sim" if valor else "Não"


def _linhas_risco(grau: GrauRisco | None) -> list[str]:
    if grau is None:
        return ["⚪ Grau de Risco: não especificado"]
    return [f"{_EMOJI_RISCO[grau]} Grau de Risco: {grau.value}", "", _EXPLICACAO_RISCO[grau]]


def _linha_cnae(indice: int, c: CnaeItem) -> str:
    return f"{indice}. {c.codigo_exibicao} - {_truncar(c.cnae_descricao)}"


def _linhas_nbs(n: ItemNbs) -> list[str]:
    linhas: list[str] = []
    if n.nbs:
        linhas += [
            "🔹 NBS (Nomenclatura Brasileira de Serviços):",
            f"   Código: {n.nbs}",
            f"   {n.nbs_descricao or ''}".rstrip(),
        ]
    if n.indop:
        linhas.append(f"📋 INDOP: {n.indop} (Indicador de Operação para IBS/CBS)")
    if n.local_incidencia_ibs:
        linhas.append(f"📍 Local de Incidência do IBS: {n.local_incidencia_ibs}")
    if n.cclass_trib:
        linhas.append(f"🏛️ Classificação Tributária: {n.cclass_trib} {n.nome_cclass_trib or ''}".rstrip())
    if n.ps_onerosa is not None:
        linhas.append(f"💰 Prestação Onerosa: {_sim_nao(n.prestacao_onerosa)}")
    if n.adq_exterior is not None:
        linhas.append(f"🌐 Aquisição Exterior: {_sim_nao(n.aquisicao_exterior)}")
    return linhas


def _cnae_to_item(r: ResultadoConsulta) -> str:
    c = _exigir(r.data[0], CnaeItem)  # type: ignore[index]
    linhas = [
        "Perfeito! Encontrei as informações sobre este CNAE:",
        "",
        f"📋 CNAE {c.codigo_exibicao} ({c.cnae})",
        c.cnae_descricao,
        "",
        f"📌 Item da Lista de Serviços: {c.item_lc or 'não informado'}",
    ]
    if c.item_servico is not None:
        linhas.append(c.item_servico.descricao)
    linhas.append("")
    linhas += _linhas_risco(c.grau_risco)
    linhas += ["", "💬 Posso ajudar com mais alguma informação sobre este CNAE ou outro código?"]
    return "\n".join(linhas)


def _cnae_details(r: ResultadoConsulta) -> str:
    c = _exigir(r.data[0], CnaeItem)  # type: ignore[index]
    linhas = [
        "Aqui estão as informações sobre o CNAE que você consultou:",
        "",
        f"📋 CNAE {c.codigo_exibicao} ({c.cnae})",
        c.cnae_descricao,
        "",
        f"📌 Item da Lista de Serviços: {c.item_lc or 'não informado'}",
    ]
    if len(r.data) > 1:  # type: ignore[arg-type]
        outros = ", ".join(str(x.item_lc) for x in r.data[1:] if isinstance(x, CnaeItem))  # type: ignore[index]
        linhas.append(f"📌 Outros itens vinculados: {outros}")
    linhas += [
        "",
        "💡 Quer saber mais? Posso informar o grau de risco e os códigos NBS/IBS/CBS deste CNAE.",
    ]
    return "\n".join(linhas)


def _item_to_details(r: ResultadoConsulta) -> str:
    item = _exigir(r.data[0], ItemServico)  # type: ignore[index]
    return "\n".join([
        "Encontrei as informações do Item da Lista de Serviços:",
        "",
        f"📌 Item {item.item_lc}",
        item.descricao,
        "",
        "💬 Precisa de mais esclarecimentos sobre este item ou outro? Estou à disposição!",
    ])


def _item_to_nbs(r: ResultadoConsulta) -> str:
    registros = [n for n in r.data if isinstance(n, ItemNbs)]  # type: ignore[union-attr]
    linhas = ["📊 Dados de NBS/IBS/CBS", "", f"📌 Item LC: {registros[0].item_lc}", ""]
    for n in registros[:LIMITE_LISTA]:
        linhas += _linhas_nbs(n)
        linhas.append("")
    if len(registros) > LIMITE_LISTA:
        linhas += [f"Mostrando {LIMITE_LISTA} de {len(registros)} códigos.", ""]
    linhas.append("💬 Precisa de mais informações sobre este item ou outro?")
    return "\n".join(linhas)


def _search_text(r: ResultadoConsulta) -> str:
    busca = _exigir(r.data, BuscaTexto)
    total = busca.total
    plural = "s" if total != 1 else ""
    linhas = [f"Encontrei {total} resultado{plural} relacionado{plural} à sua busca:", ""]
    if busca.cnaes:
        linhas += ["📋 CNAEs encontrados:", ""]
        linhas += [_linha_cnae(i, c) for i, c in enumerate(busca.cnaes[:LIMITE_BUSCA_TEXTO], 1)]
        linhas.append("")
    if busca.items:
        linhas += ["📌 Itens da Lista de Serviços:", ""]
        linhas += [
            f"{i}. Item {item.item_lc} - {_truncar(item.descricao)}"
            for i, item in enumerate(busca.items[:LIMITE_BUSCA_TEXTO], 1)
        ]
        linhas.append("")
    if len(busca.cnaes) > LIMITE_BUSCA_TEXTO or len(busca.items) > LIMITE_BUSCA_TEXTO:
        linhas += [f"Mostrando até {LIMITE_BUSCA_TEXTO} resultados de cada tipo, de {total} encontrados.", ""]
    linhas.append("💡 Dica: me pergunte sobre qualquer código acima para ver os detalhes.")
    return "\n".join(linhas)


def _search_by_risk(r: ResultadoConsulta) -> str:
    cnaes = [c for c in r.data if isinstance(c, CnaeItem)]  # type: ignore[union-attr]
    grau = cnaes[0].grau_risco
    emoji = _EMOJI_RISCO.get(grau, "⚪") if grau else "⚪"
    rotulo = grau.value if grau else "não especificado"
    linhas = [f"{emoji} Encontrei {len(cnaes)} CNAEs com grau de risco {rotulo}:", ""]
    for i, c in enumerate(cnaes[:LIMITE_LISTA], 1):
        linhas += [_linha_cnae(i, c), f"   📌 Item LC: {c.item_lc or 'não informado'}"]
    if len(cnaes) > LIMITE_LISTA:
        linhas += ["", f"Mostrando {LIMITE_LISTA} de {len(cnaes)} resultados."]
    linhas += ["", "💬 Quer saber mais detalhes sobre algum desses CNAEs?"]
    return "\n".join(linhas)


def _cnae_full_info(r: ResultadoConsulta) -> str:
    info = _exigir(r.data, InformacaoCompletaCnae)
    principal = info.cnaes[0]
    linhas = [
        f"📋 Informações completas do CNAE {principal.codigo_exibicao} ({principal.cnae})",
        principal.cnae_descricao,
        "",
    ]
    for c in info.cnaes:
        linhas.append(f"📌 Item LC {c.item_lc or 'não informado'}")
        if c.item_servico is not None:
            linhas.append(f"   {_truncar(c.item_servico.descricao)}")
    linhas.append("")
    linhas += _linhas_risco(principal.grau_risco)
    linhas.append("")
    if info.nbs:
        linhas += ["📊 Códigos NBS/IBS/CBS:", ""]
        for n in info.nbs[:LIMITE_LISTA]:
            linhas += _linhas_nbs(n)
            linhas.append("")
        if len(info.nbs) > LIMITE_LISTA:
            linhas += [f"Mostrando {LIMITE_LISTA} de {len(info.nbs)} códigos.", ""]
    else:
        linhas += ["Não encontrei códigos NBS/IBS/CBS vinculados a este CNAE.", ""]
    linhas.append(_RODAPE)
    return "\n".join(linhas)


def _cnae_by_mascara(r: ResultadoConsulta) -> str:
    cnaes = [c for c in r.data if isinstance(c, CnaeItem)]  # type: ignore[union-attr]
    if len(cnaes) == 1:
        return _cnae_to_item(r)
    linhas = [f"Encontrei {len(cnaes)} CNAEs com essa máscara:", ""]
    for i, c in enumerate(cnaes[:LIMITE_LISTA], 1):
        linhas += [_linha_cnae(i, c), f"   📌 Item LC: {c.item_lc or 'não informado'}"]
    linhas += ["", _RODAPE]
    return "\n".join(linhas)


def _search_nbs(r: ResultadoConsulta) -> str:
    registros = [n for n in r.data if isinstance(n, ItemNbs)]  # type: ignore[union-attr]
    linhas = [f"Encontrei {len(registros)} código(s) NBS relacionados à sua busca:", ""]
    for i, n in enumerate(registros[:LIMITE_LISTA], 1):
        linhas.append(f"{i}. NBS {n.nbs or '-'} - {_truncar(n.nbs_descricao)}")
        linhas.append(f"   📌 Item LC: {n.item_lc}")
    if len(registros) > LIMITE_LISTA:
        linhas += ["", f"Mostrando {LIMITE_LISTA} de {len(registros)} resultados."]
    linhas += ["", _RODAPE]
    return "\n".join(linhas)


def _list_items_by_group(r: ResultadoConsulta) -> str:
    itens = [i for i in r.data if isinstance(i, ItemServico)]  # type: ignore[union-attr]
    grupo = itens[0].item_lc.split(".")[0]
    linhas = [f"📌 Itens do grupo {grupo} da Lista de Serviços ({len(itens)}):", ""]
    linhas += [
        f"{item.item_lc} - {_truncar(item.descricao)}" for item in itens[:LIMITE_LISTA]
    ]
    if len(itens) > LIMITE_LISTA:
        linhas += ["", f"Mostrando {LIMITE_LISTA} de {len(itens)} itens."]
    linhas += ["", _RODAPE]
    return "\n".join(linhas)


_TEMPLATES: dict[QueryId, Callable[[ResultadoConsulta], str]] = {
    QueryId.CNAE_TO_ITEM: _cnae_to_item,
    QueryId.CNAE_DETAILS: _cnae_details,
    QueryId.ITEM_TO_DETAILS: _item_to_details,
    QueryId.ITEM_TO_NBS: _item_to_nbs,
    QueryId.SEARCH_TEXT: _search_text,
    QueryId.SEARCH_BY_RISK: _search_by_risk,
    QueryId.CNAE_FULL_INFO: _cnae_full_info,
    QueryId.CNAE_BY_MASCARA: _cnae_by_mascara,
    QueryId.SEARCH_NBS: _search_nbs,
    QueryId.LIST_ITEMS_BY_GROUP: _list_items_by_group,
}


def formatar_fallback(query_id: QueryId, resultado: ResultadoConsulta) -> str:
    """Texto deterministico para o resultado. Nunca levanta excecao."""
    if not resultado.success:
        detalhe = f'O sistema retornou: "{resultado.error}". ' if resultado.error else ""
        return (
            f"Ops, encontrei um problema ao processar sua solicitação. {detalhe}"
            "Pode tentar reformular sua pergunta? Estou aqui para ajudar! 😊"
        )

    if resultado.sem_dados:
        resumo = f"{resultado.summary}\n\n" if resultado.summary else "\n"
        return (
            f"Hmm, não encontrei resultados para sua consulta. {resumo}"
            "💡 Dica: tente usar o código completo do CNAE (ex: 6920601) ou palavras-chave "
            "da atividade que você procura."
        )

    try:
        return _TEMPLATES[query_id](resultado)
    except Exception:  # noqa: BLE001
        logger.exception("fallback_template_falhou", query_id=str(query_id))
        return RESPOSTA_GENERICA
