"""Abstract interfaces for the synchronisation boundary.

These ABCs define the contract that external implementations must fulfil.
The SDK ships no concrete implementation — upload queues, retry policy and
the FHIR wire client live in the host application.

Typical integration flow::

    session = QuestionnaireSession(sequence, session_id="task-42")
    step = session.start()
    # ... present steps, session.submit(answer) until step is None ...

    sink: ResponseSink = MyQueuedFhirSink(server_url)
    session.finish(sink)                 # hands the document to the sink

    # Reading documents back is delegated entirely to the sink
    sink.read("req-1", "QuestionnaireResponse?subject=Patient/7", receiver)
"""

from abc import ABC, abstractmethod

from c3pro_questionnaire.models.response import ResponseDocument


class DocumentReceiver(ABC):
    """Callback interface for documents fetched through a sink.

    ``receive_documents`` is called once per originating request id.
    """

    @abstractmethod
    def receive_documents(self, request_id: str, documents: list[ResponseDocument]) -> None:
        """Accept the documents returned for *request_id*."""
        ...


class ResponseSink(ABC):
    """Interface for the delivery subsystem that stores finished documents.

    Implementations own serialisation to the wire format and reliable
    delivery.  Both methods are expected to return quickly and do their work
    asynchronously.
    """

    @abstractmethod
    def create(self, document: ResponseDocument) -> None:
        """Queue *document* for upload."""
        ...

    @abstractmethod
    def read(self, request_id: str, search_url: str, receiver: DocumentReceiver) -> None:
        """Run a search and deliver the resulting documents to *receiver*.

        Parameters
        ----------
        request_id:
            Opaque id chosen by the caller, passed back to the receiver so
            it can match results to requests.
        search_url:
            Search query, absolute or relative to the sink's server.
        receiver:
            Called once with all documents found for this request.
        """
        ...
