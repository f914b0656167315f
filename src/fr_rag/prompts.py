"""Per-type prompt templates.

Each template pins down the output format its normalizer expects, so a
well-formed model reply needs no interpretation beyond that normalizer.
"""
from __future__ import annotations

from .schema import NOT_FOUND_ANSWER, Match, Question

CONTEXT_SEPARATOR = "\n\n---\n\n"
NO_CONTEXT = "Nenhum documento relevante foi encontrado."
DEFAULT_LOCATION = "FR"

MONETARY_TEMPLATE = """Você é um assistente especializado em extrair valores monetários de Formulários de Referência.

TAREFA: Extrair o valor monetário EXATO da seção indicada.

QUESTÃO: {question}

LOCALIZAÇÃO: {location}

INSTRUÇÕES:
{instructions}

DOCUMENTOS:
{context}

REGRAS CRÍTICAS:
1. Retorne APENAS o número com unidade (ex: "4.872.707 (em R$ mil)" ou "56.649 (em milhão)")
2. SEMPRE identifique se o valor está em R$ mil, R$ milhão ou valor absoluto
3. Busque em tabelas da seção indicada (geralmente 2.1.h ou demonstrações financeiras)
4. Para bancos: "Receitas da Intermediação Financeira" = Receita Líquida
5. Para prejuízo: inclua o sinal negativo (-)
6. Se não encontrar: "{not_found}"
7. NÃO inclua explicações, textos adicionais ou fórmulas

RESPOSTA (apenas número + unidade):
"""

YES_NO_TEMPLATE = """Você é um assistente especializado em análise de Formulários de Referência.

TAREFA: Responder SIM, NÃO, NÃO DIVULGADO ou NÃO APLICADO com base no documento.

QUESTÃO: {question}

LOCALIZAÇÃO: {location}

CRITÉRIOS DE DECISÃO:
{instructions}

OBSERVAÇÕES:
{observations}

DOCUMENTOS:
{context}

REGRAS CRÍTICAS:
1. Retorne APENAS uma das opções: "SIM", "NÃO", "NÃO DIVULGADO" ou "NÃO APLICADO"
2. NÃO inclua "=" ou texto explicativo (ex: ERRADO: "SIM = a empresa cita...")
3. NÃO inclua ponto final ou qualquer pontuação
4. SIM: quando o documento AFIRMA explicitamente
5. NÃO: quando o documento NEGA explicitamente
6. NÃO DIVULGADO: quando não há informação no documento
7. NÃO APLICADO: quando não se aplica ao caso

RESPOSTA (apenas SIM, NÃO, NÃO DIVULGADO ou NÃO APLICADO):
"""

COUNTING_TEMPLATE = """Você é um assistente especializado em contar membros e órgãos em Formulários de Referência.

TAREFA: {question}

LOCALIZAÇÃO: {location}

DOCUMENTOS:
{context}

REGRA ABSOLUTA - identificar membros corretamente:

CONSELHEIRO = SOMENTE se tiver esta estrutura:
   Nome: [NOME COMPLETO]
   CPF: [###.###.###-##]
   Órgãos da Administração:
      Órgão da Administração: "Conselho de Administração"

NÃO É CONSELHEIRO se:
   - Órgão da Administração = "Diretoria" (mesmo que seja diretor)
   - Só aparece em seção "Comitês:" (sem tabela "Órgãos da Administração")
   - Não tem a coluna "Órgão da Administração" = "Conselho de Administração"

TIPOS DE CONSELHEIROS (veja coluna "Cargo eletivo ocupado"):

INDEPENDENTE:
   - "Cargo eletivo ocupado" contém "Independente"
   - Exemplo: "Conselho de Adm. Independente (Efetivo)"
   - DEVE ter "Órgão da Administração" = "Conselho de Administração"

EXTERNO:
   - "Cargo eletivo ocupado" = "Conselho de Administração (Efetivo)"
   - SEM a palavra "Independente" E SEM a palavra "Diretor"
   - DEVE ter "Órgão da Administração" = "Conselho de Administração"

EXECUTIVO:
   - Aparece em DUAS linhas: uma com Diretoria E outra com Conselho
   - OU "Cargo eletivo ocupado" contém "Diretor" E "Conselheiro"
   - Exemplo: "Conselheiro(Efetivo) e Dir. Presidente"

MEMBROS DE COMITÊS (seção 7.4):
   - Procure a seção "Comitês:" após os dados da pessoa
   - A tabela tem: "Tipo comitê", "Cargo ocupado", "Data posse"
   - Uma pessoa pode estar em Comitê E ser Conselheiro (se tiver ambas as seções)
   - Se a pergunta é sobre "membros do Comitê que são conselheiros":
     conte APENAS quem aparece em "Comitês:" E tem "Órgão da Administração" = "Conselho de Administração"
   - Conte apenas membros efetivos/titulares, nunca suplentes

INSTRUÇÕES: {instructions}
OBSERVAÇÕES: {observations}

FORMATO DE RESPOSTA: NÚMERO (Nome1, Nome2, Nome3)
Exemplo: "3 (João Silva, Maria Santos, Pedro Oliveira)"
Se for 0: retorne apenas "0"

RESPOSTA:
"""

SPECIFIC_TEXT_TEMPLATE = """Você é um assistente especializado em extrair textos específicos de Formulários de Referência.

TAREFA: Extrair o nome/texto EXATO conforme solicitado.

QUESTÃO: {question}

LOCALIZAÇÃO: {location}

INSTRUÇÕES:
{instructions}

OBSERVAÇÕES:
{observations}

DOCUMENTOS:
{context}

REGRAS CRÍTICAS:
1. Copie o texto EXATAMENTE como está no documento
2. Remova formatação desnecessária (negrito, itálico)
3. Mantenha a capitalização original
4. Para firmas de auditoria: use o nome completo oficial
5. Para políticas: extraia APENAS o nome da política (ex: "Política de Transações com Partes Relacionadas")
   - NÃO inclua explicações ou parágrafos completos
   - Se a questão pede o nome da política, retorne somente o título (máximo 150 caracteres)
6. Se não encontrar: "{not_found}"
7. NÃO invente ou parafraseie - copie literalmente
8. IMPORTANTE: Retorne texto CURTO e DIRETO (no máximo 200 caracteres) - não retorne parágrafos longos

RESPOSTA (apenas o texto):
"""

MULTIPLE_CHOICE_TEMPLATE = """Você é um assistente especializado em análise de Formulários de Referência.

TAREFA: Escolher UMA das opções pré-definidas baseado no documento.

QUESTÃO: {question}

LOCALIZAÇÃO: {location}

OPÇÕES DISPONÍVEIS:
{instructions}

OBSERVAÇÕES:
{observations}

DOCUMENTOS:
{context}

REGRAS CRÍTICAS:
1. Retorne APENAS o texto EXATO de uma das opções listadas
2. NÃO adicione texto explicativo
3. Escolha a opção que melhor descreve o que está no documento
4. Se o documento afirma que NÃO possui/oferece algo: escolha a opção "Não"
5. Se não encontrar informação clara ou o documento não menciona: escolha "Não Divulgado"
6. Leia com atenção todas as opções antes de decidir
7. Frases como "não aplicável" ou "não oferece" significam "Não"

RESPOSTA (apenas uma das opções):
"""

GENERIC_TEMPLATE = """Você é um assistente especializado em análise de Formulários de Referência.

TAREFA: Extrair informação EXATA do documento fornecido.

QUESTÃO: {question}

LOCALIZAÇÃO: {location}

INSTRUÇÕES:
{instructions}

OBSERVAÇÕES:
{observations}

DOCUMENTOS:
{context}

REGRAS:
- Busque EXATAMENTE os termos mencionados
- Retorne APENAS a informação solicitada
- Se não encontrar: "{not_found}"

RESPOSTA:
"""


def build_context(matches: list[Match]) -> str:
    """Join retrieved passages, best first, with a visible separator."""
    if not matches:
        return NO_CONTEXT
    return CONTEXT_SEPARATOR.join(match.segment.text for match in matches)


def _fill(template: str, question: Question, context: str) -> str:
    return template.format(
        question=question.text,
        location=question.location_hint or DEFAULT_LOCATION,
        instructions=question.filling_instructions,
        observations=question.observations,
        context=context,
        not_found=NOT_FOUND_ANSWER,
    )


def monetary_prompt(question: Question, context: str) -> str:
    return _fill(MONETARY_TEMPLATE, question, context)


def yes_no_prompt(question: Question, context: str) -> str:
    return _fill(YES_NO_TEMPLATE, question, context)


def counting_prompt(question: Question, context: str) -> str:
    return _fill(COUNTING_TEMPLATE, question, context)


def specific_text_prompt(question: Question, context: str) -> str:
    return _fill(SPECIFIC_TEXT_TEMPLATE, question, context)


def multiple_choice_prompt(question: Question, context: str) -> str:
    return _fill(MULTIPLE_CHOICE_TEMPLATE, question, context)


def generic_prompt(question: Question, context: str) -> str:
    return _fill(GENERIC_TEMPLATE, question, context)
