from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

class Lead(BaseModel):
    """Lead no formato único consumido pelo painel."""
    model_config = ConfigDict(populate_by_name=True)

    id: Union[str, int, float]
    nome: str = "Sem Nome"
    telefone: str = ""
    email: Optional[str] = ""
    status: str = "Novo"
    time: str = "Geral"  # time/fila dono do lead
    data_entrada: str  # ISO
    primeira_interacao: Optional[str] = None  # ISO; ausente = ainda sem resposta
    origem: str = "Site"
    tem_atendimento: bool = False
    raw: Optional[Dict[str, Any]] = Field(default=None, alias="_raw")

    def to_dict(self) -> Dict[str, Any]:
        # primeira_interacao e _raw somem do JSON quando ausentes
        return self.model_dump(by_alias=True, exclude_none=True)

class SlaInfo(BaseModel):
    atrasado: bool
    label: str
    status: str  # "Atrasado" | "No Prazo"
    minutos: int
