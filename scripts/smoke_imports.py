from fr_rag.catalog import parse_catalog
from fr_rag.chunking import normalize_text, segment_text
from fr_rag.dispatch import enrich
from fr_rag.settings import PipelineConfig

SAMPLE_DOCUMENT = """7.3 Composição e experiência profissional da administração

Nome: Ana Souza
Cargo eletivo ocupado: Conselho de Adm. Independente (Efetivo)

Nome: Bruno Lima
Cargo eletivo ocupado: Conselho de Administração (Efetivo)
"""

SAMPLE_CATALOG = """Seq;Dificuldade;Pergunta;Local;Instruções;Observações;Tipo
1;Difícil;Quantos conselheiros independentes?;7.3;;;CONTAGEM
2;Fácil;Qual a receita líquida?;2.1.h;"Informar ""Receita""\";;MONETARIA
"""


if __name__ == "__main__":
    config = PipelineConfig()
    segments = segment_text(
        normalize_text(SAMPLE_DOCUMENT),
        max_tokens=config.max_segment_tokens,
        overlap_tokens=config.segment_overlap_tokens,
    )
    questions = parse_catalog(SAMPLE_CATALOG).questions
    print(
        {
            "segments": len(segments),
            "questions": len(questions),
            "query_lengths": [len(enrich(question)) for question in questions],
        }
    )
