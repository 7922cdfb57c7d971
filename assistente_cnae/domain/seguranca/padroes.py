# assistente_cnae/domain/seguranca/padroes.py
#
# Pattern libraries used by RegexContentGuard.
#
# Kept as plain data so the lists can be reviewed and extended without touching
# control flow. Every entry is compiled with re.IGNORECASE.
#
# PADROES_INJECAO  : applied to user input (and to the classifier's raw output).
# PADROES_VAZAMENTO: applied to LLM text before it reaches the client.
from __future__ import annotations

PADROES_INJECAO: tuple[str, ...] = (
    # "ignore previous instructions" (EN)
    r"ignore\s+(all\s+|any\s+|the\s+)?(previous|prior|above|earlier)\s+(instructions|rules|prompts?|messages)",
    r"disregard\s+(all\s+|any\s+|the\s+)?(previous|prior|above)\s+(instructions|rules)",
    r"forget\s+(all\s+|everything\s+|your\s+)?(previous\s+)?(instructions|rules|training)",
    # "ignore as instrucoes anteriores" (PT): exige qualificador ou possessivo
    r"ignor[ea]r?\s+(todas\s+)?(as\s+)?(instru[cç][oõ]es|regras|ordens)\s+(anteriores|acima|pr[eé]vias)",
    r"ignor[ea]r?\s+(todas\s+)?(as\s+)?(suas|minhas|tuas)\s+(instru[cç][oõ]es|regras|ordens)",
    r"esque[cç]a\s+(todas\s+)?(as\s+)?(instru[cç][oõ]es|regras)\s+(anteriores|acima|pr[eé]vias)",
    r"esque[cç]a\s+(todas\s+)?(as\s+)?(suas|minhas|tuas)\s+(instru[cç][oõ]es|regras)",
    r"desconsidere\s+(todas\s+)?(as\s+)?(instru[cç][oõ]es|regras)\s+(anteriores|acima|pr[eé]vias)",
    r"desconsidere\s+(todas\s+)?(as\s+)?(suas|minhas|tuas)\s+(instru[cç][oõ]es|regras)",
    # troca de papel
    r"you\s+are\s+now\s+",
    r"act\s+as\s+(an?\s+)?",
    r"pretend\s+(to\s+be|you\s+are)",
    r"a\s+partir\s+de\s+agora\s+voc[eê]\s+([eé]|ser[aá])",
    r"finja\s+(que|ser)",
    r"aja\s+como\s+",
    r"voc[eê]\s+agora\s+[eé]\s+",
    r"modo\s+(desenvolvedor|developer|dan|jailbreak)",
    r"\bjailbreak\b",
    # pedidos pelo prompt interno
    r"(reveal|show|print|repeat)\s+(me\s+)?(your|the)\s+(system\s+)?(prompt|instructions)",
    r"(mostre|revele|repita|imprima)\s+(o\s+|as\s+|suas\s+)?(seu\s+)?(prompt|instru[cç][oõ]es)",
    r"system\s+prompt",
    r"instru[cç][oõ]es\s+(do\s+sistema|internas)",
    # marcadores de papel de chat
    r"^\s*(system|assistant)\s*:",
    r"\[/?INST\]",
    r"<\|im_(start|end)\|>",
    # sintaxe de template e scripts
    r"\{\{.*?\}\}",
    r"\$\{.*?\}",
    r"<\s*script\b",
    r"javascript\s*:",
)

PADROES_VAZAMENTO: tuple[str, ...] = (
    r"system\s+prompt",
    r"prompt\s+(do\s+)?sistema",
    r"CRITICAL_SECURITY_RULES",
    r"ANTI_HALLUCINATION_RULES",
    r"<\s*/?\s*TASK\s*>",
    r"DECISION_SYSTEM_PROMPT",
    r"FORMAT_SYSTEM_PROMPT",
    r"JSON_FORMAT_INSTRUCTIONS",
    r"EXTRACTION_RULES",
    r"montar_mensagens_(decisao|formatacao)",
    r"minhas\s+(instru[cç][oõ]es|regras)\b",
    r"regras\s+internas",
    r"(sou|como)\s+uma?\s+(ia|intelig[eê]ncia\s+artificial|modelo\s+de\s+linguagem)\s+(governad|configurad|programad|instru[ií]d)",
    r"as\s+an\s+ai\s+(language\s+)?model",
    r"my\s+(system\s+)?instructions",
)
