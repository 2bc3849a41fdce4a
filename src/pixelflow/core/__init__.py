"""
Core do Pixelflow.

Componentes principais:
    - pipeline     → Steps, tipos, registry de colaboradores e RunContext
    - engine       → grafo, planejamento em waves, executor e Engine
    - config       → resolução de configuração
    - traceability → Manifest e Event Log

Princípios fundamentais:
    - Erros estruturais são detectados antes de qualquer efeito externo
    - Estado de uma run vive apenas no seu RunContext
    - Colaboradores externos são acessados apenas via registry
"""
