from pydantic import BaseModel, ConfigDict, Field


class RunReport(BaseModel):
    """
    Summary printed when a run ends.
    """

    model_config = ConfigDict(frozen=True)

    url: str = ""
    requests_sent: int = Field(0, ge=0)
    responses_received: int = Field(0, ge=0)
    timeout_rate: float = Field(0.0, ge=0, le=100)

    @classmethod
    def from_counts(cls, url: str, requests_sent: int, responses_received: int):
        """
        Build a report, defining the rate as 0% when nothing was sent.
        """
        if requests_sent == 0:
            rate = 0.0
        else:
            rate = (requests_sent - responses_received) / requests_sent * 100
        return cls(
            url=url,
            requests_sent=requests_sent,
            responses_received=responses_received,
            timeout_rate=rate,
        )

    def render(self) -> str:
        return (
            f"--- GET {self.url} statistics ---\n"
            f"{self.requests_sent} requests transmitted, "
            f"{self.responses_received} responses received, "
            f"{self.timeout_rate:.2f}% timeout"
        )
