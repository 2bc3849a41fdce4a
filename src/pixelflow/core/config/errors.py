"""
Exceções canônicas da camada de configuração do Pixelflow.

Este módulo define a hierarquia de exceções utilizadas durante o
carregamento, o merge e a interpretação da configuração do engine.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção aqui representa falha de execução de Step

Limites explícitos:
    - Não executa pipeline
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do Pixelflow.

    Permite captura genérica de falhas de load/merge/interpretação,
    distinta das falhas estruturais do pipeline (`ConfigurationError`)
    e das falhas de execução (`PipelineStepError`).
    """


class DefaultsNotFoundError(ConfigError):
    """O arquivo de defaults (obrigatório) não existe no caminho informado."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo não suportada.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz da configuração não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"engine": {"concurrency": 4}}
        - override: {"engine": "fast"}
    """


class InvalidConcurrencyError(ConfigError, ValueError):
    """Valor de `concurrency` que não é inteiro positivo nem "unbounded"."""


class ConfigParseError(ConfigError):
    """Arquivo YAML/JSON sintaticamente inválido."""
